"""
Stable compass heading from raw magnetometer samples.

This module turns noisy 3-axis magnetometer vectors into a heading that is
steady enough to drive a compass dial and alignment feedback. Each accepted
sample goes through three stages:

1. Raw heading: atan2(x, y) in degrees, normalized to [0, 360)
2. Smoothing: circular mean over a small ring buffer (default 5 samples),
   with correction when the buffer straddles the 0°/360° seam
3. Deadband: the smoothed value replaces the StableHeading only when it moves
   by more than the deadband (default 2°)

Samples with a missing or non-finite axis are dropped without touching the
buffer; sensor glitches are expected and must not disturb the output.

Usage:
    estimator = HeadingEstimator()
    stable = estimator.ingest(sample)
    if stable is not None:
        # Heading moved past the deadband
"""

import logging
import math
from collections import deque
from typing import Deque, List, Optional

from solarcompass.core.guidance_types import HeadingSample
from solarcompass.core.imu.angles import circular_distance, circular_mean, vector_to_heading
from solarcompass.utils.config_sections import HeadingConfig, load_heading_config

log = logging.getLogger(__name__)


class SmoothingBuffer:
    """Fixed-capacity ring of raw headings, oldest evicted first."""

    def __init__(self, capacity: int = 5) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least one")
        self.capacity = capacity
        self._values: Deque[float] = deque(maxlen=capacity)

    def append(self, heading: float) -> None:
        self._values.append(heading)

    def mean(self) -> float:
        return circular_mean(list(self._values))

    def values(self) -> List[float]:
        return list(self._values)

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


class HeadingEstimator:
    """Smooth raw magnetometer headings and emit deadband-filtered updates."""

    def __init__(self, config: Optional[HeadingConfig] = None) -> None:
        self.config = config or load_heading_config()
        self.buffer = SmoothingBuffer(self.config.buffer_size)
        self.stable_heading: Optional[float] = None

        # Statistics
        self.samples_accepted = 0
        self.samples_rejected = 0

    def ingest(self, sample: HeadingSample) -> Optional[float]:
        """
        Feed one magnetometer sample.

        Args:
            sample: Raw vector from the sensor source

        Returns:
            The new StableHeading in [0, 360) when it moved past the deadband,
            otherwise None (sample rejected or change too small).
        """
        raw = self.raw_heading(sample)
        if raw is None:
            self.samples_rejected += 1
            log.debug("Dropping malformed sample: %s", sample)
            return None

        self.samples_accepted += 1
        self.buffer.append(raw)
        smoothed = self.buffer.mean()

        if self.stable_heading is not None:
            if circular_distance(smoothed, self.stable_heading) <= self.config.deadband_deg:
                return None

        self.stable_heading = smoothed
        return smoothed

    @staticmethod
    def raw_heading(sample: HeadingSample) -> Optional[float]:
        """Single-sample heading, or None if any axis is missing or non-finite."""
        axes = (sample.x, sample.y, sample.z)
        try:
            if any(axis is None or not math.isfinite(axis) for axis in axes):
                return None
        except TypeError:
            return None
        return vector_to_heading(sample.x, sample.y)

    def reset(self) -> None:
        """Forget buffered headings, the StableHeading and the sample counts."""
        self.buffer.clear()
        self.stable_heading = None
        self.samples_accepted = 0
        self.samples_rejected = 0
