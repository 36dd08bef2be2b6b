"""
Centralized configuration for the Solar Compass guidance engine.

This module provides all configuration constants for:
- Magnetometer sampling (update interval)
- Heading smoothing (buffer size, deadband)
- Alignment bands (aligned / near cut lines)
- Feedback (haptic pulse, rotation easing)
- Session logging

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from solarcompass.utils.config import Config

    interval = Config.SENSOR_UPDATE_INTERVAL_MS
    if distance < Config.ALIGNMENT_ALIGNED_DEG:
        # Aligned with the target azimuth
"""

import logging

log = logging.getLogger(__name__)


class Config:
    """System configuration constants for the heading alignment guidance engine."""

    # ==========================================================================
    # SENSOR: Magnetometer subscription
    # ==========================================================================

    SENSOR_UPDATE_INTERVAL_MS = 100     # Fixed sampling interval (100-200 ms)
    SENSOR_MIN_INTERVAL_MS = 100
    SENSOR_MAX_INTERVAL_MS = 200

    # ==========================================================================
    # HEADING: Smoothing buffer & deadband
    # ==========================================================================

    HEADING_BUFFER_SIZE = 5             # Ring buffer of raw headings
    HEADING_DEADBAND_DEG = 2.0          # Minimum change before StableHeading moves

    # ==========================================================================
    # ALIGNMENT: Bands relative to the target azimuth
    # ==========================================================================

    ALIGNMENT_ALIGNED_DEG = 10.0        # distance < 10 -> aligned
    ALIGNMENT_NEAR_DEG = 30.0           # 10 <= distance < 30 -> near
    DEFAULT_TARGET_AZIMUTH = 180.0      # Used when the upstream result has none

    # ==========================================================================
    # FEEDBACK: Haptics & rotation
    # ==========================================================================

    HAPTIC_ENABLED = True
    HAPTIC_PULSE_MS = 50
    HAPTIC_TONE_FREQUENCY = 180         # Hz, desktop audio pulse
    HAPTIC_TONE_VOLUME = 0.6

    ROTATION_EASING_MS = 200            # Presentation easing toward -heading

    # ==========================================================================
    # SIMULATION: Development without a device
    # ==========================================================================

    SIMULATED_FIELD_STRENGTH = 45.0     # μT, horizontal component
    SIMULATED_NOISE_DEG = 0.8           # Std dev of heading noise

    # ==========================================================================
    # LOGGING
    # ==========================================================================

    LOG_DIR = "logs"
    LOG_LEVEL = "INFO"
