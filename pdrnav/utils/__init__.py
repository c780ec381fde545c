"""
Utility functions for the PDR estimator.

This module provides heading (compass angle) helpers shared by the sensor
models and the particle filter.
"""

from .angles import (
    wrap_heading_deg,
    wrap_heading_deg_array,
    heading_diff_deg,
    heading_to_unit_vector,
)

__all__ = [
    'wrap_heading_deg',
    'wrap_heading_deg_array',
    'heading_diff_deg',
    'heading_to_unit_vector',
]
