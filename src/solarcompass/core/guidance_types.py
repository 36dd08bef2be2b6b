"""
Shared value types for the heading alignment guidance engine.

Types:
- HeadingSample: raw magnetometer vector delivered by a SensorSource
- AlignmentState: band of the heading relative to the target azimuth
- PermissionState: sensor/location permission lifecycle
- GuidanceStatus: lifecycle signal exposed to the presentation layer
- GuidanceSnapshot: one published update for the presentation layer

Usage:
    sample = HeadingSample(x=12.0, y=30.5, z=-4.2, timestamp=time.monotonic())
    if snapshot.alignment_state is AlignmentState.ALIGNED:
        ...
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class HeadingSample:
    """
    Raw magnetic vector from the magnetometer.

    Attributes:
        x, y, z: Field components (μT). Any of them may be None or NaN on glitches.
        timestamp: Monotonic capture time in seconds
    """
    x: Optional[float]
    y: Optional[float]
    z: Optional[float]
    timestamp: float = 0.0


class AlignmentState(Enum):
    ALIGNED = "aligned"
    NEAR = "near"
    MISALIGNED = "misaligned"


class PermissionState(Enum):
    UNKNOWN = "unknown"
    PENDING = "pending"
    GRANTED = "granted"
    DENIED = "denied"


class GuidanceStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    PERMISSION_DENIED = "permission_denied"
    SENSOR_UNAVAILABLE = "sensor_unavailable"
    STOPPED = "stopped"


@dataclass(frozen=True)
class GuidanceSnapshot:
    """
    Read-only view published to the presentation layer.

    heading_degrees is in [0, 360) and distance_degrees in [0, 180]; both are
    rounded for display. rotation_angle is the dial rotation target.
    """
    status: GuidanceStatus
    target_azimuth: float
    heading_degrees: Optional[int] = None
    distance_degrees: Optional[int] = None
    alignment_state: Optional[AlignmentState] = None
    rotation_angle: float = 0.0
    is_aligned: bool = False
    message: Optional[str] = None
