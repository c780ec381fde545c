"""
Heading wrapping and manipulation utilities.

PDR headings are compass-style angles in degrees kept in [0, 360):
    0   = facing the reference direction ("north", +y on the floor plan)
    90  = facing +x ("east")

Critical for:
- Heading estimation from device orientation
- Per-particle heading hypotheses in the particle filter
- Bias correction that can push a heading past 0 or 360
"""

from typing import Union

import numpy as np


def wrap_heading_deg(angle: float) -> float:
    """
    Wrap a heading in degrees to the [0, 360) range.

    A plain ``angle % 360`` can return exactly 360.0 for tiny negative
    inputs due to floating point rounding, so the result is folded back.

    Args:
        angle: Heading in degrees (any finite value).

    Returns:
        Wrapped heading in range [0, 360).

    Example:
        >>> wrap_heading_deg(370.0)
        10.0
        >>> wrap_heading_deg(-90.0)
        270.0
    """
    wrapped = float(angle % 360.0)
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def wrap_heading_deg_array(angles: np.ndarray) -> np.ndarray:
    """
    Wrap an array of headings in degrees to [0, 360).

    Vectorized version of wrap_heading_deg() used for particle headings.

    Args:
        angles: Array of headings in degrees.

    Returns:
        Array of wrapped headings in range [0, 360).
    """
    wrapped = np.mod(np.asarray(angles, dtype=float), 360.0)
    return np.where(wrapped >= 360.0, 0.0, wrapped)


def heading_diff_deg(
    angle1: Union[float, np.ndarray], angle2: Union[float, np.ndarray]
) -> Union[float, np.ndarray]:
    """
    Shortest signed difference angle1 - angle2 in degrees, in [-180, 180).

    Example:
        >>> heading_diff_deg(359.0, 1.0)
        -2.0
    """
    diff = (np.asarray(angle1, dtype=float) - np.asarray(angle2, dtype=float) + 180.0) % 360.0 - 180.0
    if np.ndim(diff) == 0:
        return float(diff)
    return diff


def heading_to_unit_vector(heading_deg: Union[float, np.ndarray]) -> np.ndarray:
    """
    Convert compass heading(s) to planar unit direction vector(s).

    heading = 0 moves along +y, heading = 90 moves along +x:
        [dx, dy] = [sin(h), cos(h)]

    Args:
        heading_deg: Heading(s) in degrees, scalar or shape (N,).

    Returns:
        Direction vector(s), shape (2,) or (N, 2).
    """
    rad = np.deg2rad(heading_deg)
    return np.stack([np.sin(rad), np.cos(rad)], axis=-1)
