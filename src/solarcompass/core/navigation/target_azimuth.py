"""Target azimuth handed over from the yield computation result."""

import logging
import math
from typing import Any, Mapping, Optional

from solarcompass.core.imu.angles import normalize_angle

log = logging.getLogger(__name__)


def parse_target_azimuth(value: Any, default: Optional[float] = None) -> float:
    """
    Read the session's target azimuth.

    Accepts a number, a numeric string (navigation parameter), or the upstream
    result mapping {"meta": {"optimal_azimuth": ...}}. Anything unusable falls
    back to the default (Config.DEFAULT_TARGET_AZIMUTH, 180° due south).
    """
    if default is None:
        from solarcompass.utils.config import Config

        default = getattr(Config, "DEFAULT_TARGET_AZIMUTH", 180.0)

    if isinstance(value, Mapping):
        value = value.get("meta", {}).get("optimal_azimuth")

    try:
        azimuth = float(value)
    except (TypeError, ValueError):
        log.warning("Unusable target azimuth %r, using %.0f°", value, default)
        return normalize_angle(default)

    if not math.isfinite(azimuth):
        log.warning("Non-finite target azimuth %r, using %.0f°", value, default)
        return normalize_angle(default)
    return normalize_angle(azimuth)
