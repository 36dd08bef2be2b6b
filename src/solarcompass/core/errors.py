"""Exceptions raised by the guidance engine and its platform adapters."""


class PlatformError(RuntimeError):
    """A platform bridge (sensor, permission, settings) failed."""


class SensorUnavailableError(PlatformError):
    """The device has no usable magnetometer."""


class PermissionTransitionError(ValueError):
    """A permission state change that the lifecycle does not allow."""
