"""
Alignment of the stable heading against a fixed target azimuth.

Bands (canonical thresholds, configurable through AlignmentConfig):
- 'aligned':    distance < 10°
- 'near':       10° <= distance < 30°
- 'misaligned': distance >= 30°

The distance is the minimal circular separation, so a target of 10° and a
heading of 200° are 170° apart, not 190°. The classifier remembers only the
last band it reported, which is enough to flag the moment the heading enters
the aligned band (edge-triggered, one haptic pulse per entry).
"""

from dataclasses import dataclass
from typing import Optional

from solarcompass.core.guidance_types import AlignmentState
from solarcompass.core.imu.angles import circular_distance
from solarcompass.utils.config_sections import AlignmentConfig, load_alignment_config


@dataclass(frozen=True)
class AlignmentReading:
    """Result of classifying one StableHeading."""
    distance: float
    state: AlignmentState
    just_entered: bool

    @property
    def is_aligned(self) -> bool:
        """Textual aligned/not-aligned label, derived from the same band."""
        return self.state is AlignmentState.ALIGNED


class AlignmentClassifier:
    """Map heading-to-target distance to an alignment band."""

    def __init__(self, config: Optional[AlignmentConfig] = None) -> None:
        self.config = config or load_alignment_config()
        self.last_state: Optional[AlignmentState] = None

    def band_for(self, distance: float) -> AlignmentState:
        if distance < self.config.aligned_deg:
            return AlignmentState.ALIGNED
        if distance < self.config.near_deg:
            return AlignmentState.NEAR
        return AlignmentState.MISALIGNED

    def classify(self, heading: float, target: float) -> AlignmentReading:
        """
        Classify a StableHeading against the target azimuth.

        Args:
            heading: StableHeading in degrees
            target: Target azimuth in degrees

        Returns:
            AlignmentReading with distance in [0, 180], band and entry flag
        """
        distance = circular_distance(target, heading)
        state = self.band_for(distance)
        just_entered = (
            state is AlignmentState.ALIGNED
            and self.last_state is not AlignmentState.ALIGNED
        )
        self.last_state = state
        return AlignmentReading(distance=distance, state=state, just_entered=just_entered)

    def reset(self) -> None:
        self.last_state = None
