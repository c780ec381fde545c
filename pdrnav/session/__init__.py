"""
PDR session: mutable state aggregate and the per-sample update cycle.
"""

from pdrnav.session.state import (
    PDRState,
    create_pdr_state,
    reset_pdr_state,
    set_starting_position,
    set_heading_bias,
)
from pdrnav.session.tracker import PDRTracker, TrackingPhase

__all__ = [
    "PDRState",
    "create_pdr_state",
    "reset_pdr_state",
    "set_starting_position",
    "set_heading_bias",
    "PDRTracker",
    "TrackingPhase",
]
