"""
Angle helpers for compass headings.

All headings are degrees clockwise from magnetic north. normalize_angle() maps
any finite value into [0, 360); circular_distance() gives the minimal
separation on the circle, in [0, 180].
"""

import math
from typing import Sequence

import numpy as np


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [0, 360). Raises ValueError for NaN or infinity."""
    if not math.isfinite(angle):
        raise ValueError(f"Cannot normalize non-finite angle {angle}")
    wrapped = ((angle % 360.0) + 360.0) % 360.0
    # Tiny negative inputs can round up to exactly 360.0
    if wrapped >= 360.0:
        return 0.0
    return float(wrapped)


def circular_distance(a: float, b: float) -> float:
    """Minimal angular distance between two headings, in [0, 180]."""
    diff = abs(normalize_angle(a) - normalize_angle(b))
    if diff > 180.0:
        diff = abs(diff - 360.0)
    return diff


def vector_to_heading(x: float, y: float) -> float:
    """Planar heading of a magnetic vector, normalized to [0, 360)."""
    return normalize_angle(float(np.degrees(np.arctan2(x, y))))


def circular_mean(values: Sequence[float]) -> float:
    """
    Mean of headings with correction for the 0/360 seam.

    If any adjacent pair of values differs by more than 180°, the sequence is
    taken to straddle north: values below 180 are shifted up by 360 before the
    arithmetic mean, and the result is wrapped back into [0, 360).

    Args:
        values: Headings in [0, 360), oldest first

    Returns:
        Mean heading in [0, 360)
    """
    if len(values) == 0:
        raise ValueError("circular_mean() requires at least one value")
    if len(values) == 1:
        return normalize_angle(values[0])

    headings = np.asarray(values, dtype=float)
    crosses_seam = bool(np.any(np.abs(np.diff(headings)) > 180.0))
    if crosses_seam:
        headings = np.where(headings < 180.0, headings + 360.0, headings)
    return normalize_angle(float(np.mean(headings)))
