"""
Simulation utilities for generating synthetic smartphone sensor streams.

Modules:
    walk: Corridor walk with footfall pulses, turn rates and noisy orientation
"""

from pdrnav.sim.walk import WalkDataset, generate_corridor_walk

__all__ = [
    "WalkDataset",
    "generate_corridor_walk",
]
