"""
Typed configuration sections for the Solar Compass guidance engine.

This module provides strongly-typed configuration sections to replace
scattered getattr(Config, ...) calls with proper type hints and defaults.

Benefits:
- Type safety: IDE autocomplete and type checking
- Discoverability: All config options visible in one place
- Default values: Centralized and documented
- Better testing: Can mock entire config sections
"""

from dataclasses import dataclass


@dataclass
class HeadingConfig:
    """Configuration for heading smoothing and deadband filtering."""

    # Number of raw headings kept for the circular mean
    buffer_size: int = 5

    # StableHeading only moves when the smoothed value differs by more than this
    deadband_deg: float = 2.0

    def __post_init__(self) -> None:
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be at least one")
        if self.deadband_deg < 0:
            raise ValueError("deadband_deg must be non-negative")


@dataclass
class AlignmentConfig:
    """Configuration for alignment bands."""

    aligned_deg: float = 10.0
    near_deg: float = 30.0

    def __post_init__(self) -> None:
        if self.aligned_deg <= 0:
            raise ValueError("aligned_deg must be positive")
        if self.near_deg <= self.aligned_deg:
            raise ValueError("near_deg must be greater than aligned_deg")


@dataclass
class SensorConfig:
    """Configuration for the magnetometer subscription."""

    update_interval_ms: int = 100
    min_interval_ms: int = 100
    max_interval_ms: int = 200

    def __post_init__(self) -> None:
        if not self.min_interval_ms <= self.update_interval_ms <= self.max_interval_ms:
            raise ValueError(
                f"update_interval_ms must be within "
                f"[{self.min_interval_ms}, {self.max_interval_ms}] ms"
            )


@dataclass
class HapticConfig:
    """Configuration for alignment-entry feedback."""

    enabled: bool = True
    pulse_ms: int = 50

    # Desktop audio pulse
    tone_frequency: int = 180  # Hz
    tone_volume: float = 0.6  # 0.0 to 1.0


@dataclass
class RotationConfig:
    """Configuration for the presentation rotation easing."""

    easing_ms: float = 200.0

    def __post_init__(self) -> None:
        if self.easing_ms < 0:
            raise ValueError(f"easing_ms must be >= 0, got {self.easing_ms}")


@dataclass
class SimulationConfig:
    """Configuration for the simulated sensor source."""

    field_strength: float = 45.0  # μT
    noise_deg: float = 0.8


def load_heading_config() -> HeadingConfig:
    """
    Load heading configuration from Config with fallback defaults.

    Returns:
        HeadingConfig with values from Config or defaults
    """
    from solarcompass.utils.config import Config

    return HeadingConfig(
        buffer_size=getattr(Config, "HEADING_BUFFER_SIZE", 5),
        deadband_deg=getattr(Config, "HEADING_DEADBAND_DEG", 2.0),
    )


def load_alignment_config() -> AlignmentConfig:
    """
    Load alignment configuration from Config with fallback defaults.

    Returns:
        AlignmentConfig with values from Config or defaults
    """
    from solarcompass.utils.config import Config

    return AlignmentConfig(
        aligned_deg=getattr(Config, "ALIGNMENT_ALIGNED_DEG", 10.0),
        near_deg=getattr(Config, "ALIGNMENT_NEAR_DEG", 30.0),
    )


def load_sensor_config() -> SensorConfig:
    """
    Load sensor configuration from Config with fallback defaults.

    Returns:
        SensorConfig with values from Config or defaults
    """
    from solarcompass.utils.config import Config

    return SensorConfig(
        update_interval_ms=getattr(Config, "SENSOR_UPDATE_INTERVAL_MS", 100),
        min_interval_ms=getattr(Config, "SENSOR_MIN_INTERVAL_MS", 100),
        max_interval_ms=getattr(Config, "SENSOR_MAX_INTERVAL_MS", 200),
    )


def load_haptic_config() -> HapticConfig:
    """
    Load haptic configuration from Config with fallback defaults.

    Returns:
        HapticConfig with values from Config or defaults
    """
    from solarcompass.utils.config import Config

    return HapticConfig(
        enabled=getattr(Config, "HAPTIC_ENABLED", True),
        pulse_ms=getattr(Config, "HAPTIC_PULSE_MS", 50),
        tone_frequency=getattr(Config, "HAPTIC_TONE_FREQUENCY", 180),
        tone_volume=getattr(Config, "HAPTIC_TONE_VOLUME", 0.6),
    )


def load_rotation_config() -> RotationConfig:
    """Load rotation easing configuration from Config with fallback defaults."""
    from solarcompass.utils.config import Config

    return RotationConfig(
        easing_ms=getattr(Config, "ROTATION_EASING_MS", 200.0),
    )


def load_simulation_config() -> SimulationConfig:
    """Load simulated sensor configuration from Config with fallback defaults."""
    from solarcompass.utils.config import Config

    return SimulationConfig(
        field_strength=getattr(Config, "SIMULATED_FIELD_STRENGTH", 45.0),
        noise_deg=getattr(Config, "SIMULATED_NOISE_DEG", 0.8),
    )
