"""
Solar Compass - heading alignment guidance for solar panels.

Subpackages:
- core.imu          : raw heading, circular smoothing, deadband
- core.navigation   : alignment bands, rotation, guidance controller, builder
- core.permissions  : permission lifecycle and per-platform adapters
- core.hardware     : magnetometer sensor sources
- core.haptics      : alignment feedback backends
- core.telemetry    : session loggers
- utils             : configuration
"""

__version__ = "1.0.0"
