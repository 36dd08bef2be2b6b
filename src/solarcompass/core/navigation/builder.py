"""
Builder for guidance sessions.

Picks the platform adapters once, at construction time:

    platform    permission          sensor                     haptics
    android     Android runtime     MagnetometerSensorSource   DeviceHaptics
    ios         iOS authorization   MagnetometerSensorSource   DeviceHaptics
    web         none (granted)      UnavailableSensorSource    NullHaptics
    simulated   none (granted)      SimulatedSensorSource      AudioPulseHaptics
"""

import logging
from typing import Any, Iterable, Optional

from solarcompass.core.errors import PlatformError
from solarcompass.core.hardware.sensor_source import (
    MagnetometerSensorSource,
    SensorSource,
    UnavailableSensorSource,
)
from solarcompass.core.haptics.haptic_feedback import (
    AudioPulseHaptics,
    DeviceHaptics,
    HapticFeedback,
    NullHaptics,
)
from solarcompass.core.mock_sensor_source import SimulatedSensorSource
from solarcompass.core.navigation.guidance_controller import GuidanceController
from solarcompass.core.navigation.target_azimuth import parse_target_azimuth
from solarcompass.core.permissions.permission_manager import PermissionLifecycleManager
from solarcompass.core.permissions.providers import create_permission_provider

log = logging.getLogger(__name__)

DEVICE_PLATFORMS = ("android", "ios")
SUPPORTED_PLATFORMS = DEVICE_PLATFORMS + ("web", "simulated")


class GuidanceBuilder:
    """Creates the platform-specific dependencies of a GuidanceController."""

    def __init__(
        self,
        platform_name: str,
        permission_bridge: Optional[Any] = None,
        sensor_bridge: Optional[Any] = None,
        haptic_bridge: Optional[Any] = None,
    ) -> None:
        self.platform_name = platform_name.lower()
        if self.platform_name not in SUPPORTED_PLATFORMS:
            raise PlatformError(f"Unsupported platform '{platform_name}'")
        self.permission_bridge = permission_bridge
        self.sensor_bridge = sensor_bridge
        self.haptic_bridge = haptic_bridge

    def build_permission_manager(self) -> PermissionLifecycleManager:
        provider = create_permission_provider(self.platform_name, self.permission_bridge)
        return PermissionLifecycleManager(provider)

    def build_sensor_source(self, simulated_headings: Optional[Iterable[float]] = None) -> SensorSource:
        if self.platform_name in DEVICE_PLATFORMS:
            if self.sensor_bridge is None:
                raise PlatformError(f"Platform '{self.platform_name}' requires a sensor bridge")
            return MagnetometerSensorSource(self.sensor_bridge)
        if self.platform_name == "simulated":
            return SimulatedSensorSource(headings=simulated_headings)
        return UnavailableSensorSource()

    def build_haptics(self) -> HapticFeedback:
        if self.platform_name in DEVICE_PLATFORMS and self.haptic_bridge is not None:
            return DeviceHaptics(self.haptic_bridge)
        if self.platform_name == "simulated":
            return AudioPulseHaptics()
        return NullHaptics()

    def build_controller(
        self,
        target_azimuth: Any,
        simulated_headings: Optional[Iterable[float]] = None,
    ) -> GuidanceController:
        """
        Assemble a controller for the upstream result's optimal azimuth.

        Args:
            target_azimuth: Number, numeric string or upstream result mapping
            simulated_headings: Heading script for the simulated platform
        """
        target = parse_target_azimuth(target_azimuth)
        log.info("Building %s guidance session, target %.1f°", self.platform_name, target)
        return GuidanceController(
            target_azimuth=target,
            sensor_source=self.build_sensor_source(simulated_headings),
            permission_manager=self.build_permission_manager(),
            haptics=self.build_haptics(),
        )
