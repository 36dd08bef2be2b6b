"""
Dial rotation for the compass presentation.

The dial turns opposite to the heading so north stays put on screen. Rotation
values are unwrapped: next_rotation() picks the equivalent of -heading closest
to the previous rotation, so crossing north turns the dial a few degrees
instead of spinning it almost a full turn.
"""

from typing import Optional

from solarcompass.core.imu.angles import normalize_angle
from solarcompass.utils.config_sections import RotationConfig, load_rotation_config


def next_rotation(previous_rotation: float, heading: float) -> float:
    """
    Rotation target for a new StableHeading.

    Args:
        previous_rotation: Last rotation target (unwrapped degrees)
        heading: New StableHeading in [0, 360)

    Returns:
        A value congruent to -heading (mod 360) within 180° of previous_rotation
    """
    delta = normalize_angle(-heading - previous_rotation)
    if delta > 180.0:
        delta -= 360.0
    return previous_rotation + delta


def interpolate_rotation(
    start: float,
    end: float,
    elapsed_ms: float,
    duration_ms: Optional[float] = None,
    config: Optional[RotationConfig] = None,
) -> float:
    """
    Ease-out (cubic) rotation between two targets, sampled by the presentation layer.

    The duration defaults to RotationConfig.easing_ms.
    """
    if duration_ms is None:
        duration_ms = (config or load_rotation_config()).easing_ms
    if duration_ms <= 0 or elapsed_ms >= duration_ms:
        return end
    if elapsed_ms <= 0:
        return start
    progress = elapsed_ms / duration_ms
    eased = 1.0 - (1.0 - progress) ** 3
    return start + (end - start) * eased
