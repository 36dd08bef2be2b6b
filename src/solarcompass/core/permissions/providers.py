"""
Platform permission adapters.

One PermissionProvider per operating system, chosen once when the guidance
session is built. Each adapter wraps the platform bridge and reports a
PermissionState, so the controller never branches on the platform name.

Bridges (supplied by the host application):
- Android: request_permissions(names) -> {name: "granted" | "denied"},
           open_app_settings() -> None
- iOS:     request_authorization() -> status string,
           open_settings_url() -> bool
- Web:     no bridge; the browser exposes no OS prompt for the compass

Usage:
    provider = create_permission_provider("android", bridge)
    state = provider.request_permission()
"""

import logging
from typing import Any, Dict, Optional, Sequence

from solarcompass.core.errors import PlatformError
from solarcompass.core.guidance_types import PermissionState

log = logging.getLogger(__name__)


class PermissionProvider:
    """Capability to request the permissions needed to read the magnetometer."""

    platform_name = "generic"

    def request_permission(self) -> PermissionState:
        raise NotImplementedError

    def open_settings(self) -> bool:
        """Open the platform settings surface. Returns False if it cannot."""
        raise NotImplementedError


class AndroidPermissionProvider(PermissionProvider):
    """Android runtime permissions: location and sensors must both be granted."""

    platform_name = "android"
    REQUIRED_PERMISSIONS = ("location", "sensors")

    def __init__(self, bridge: Any, permissions: Sequence[str] = REQUIRED_PERMISSIONS) -> None:
        self.bridge = bridge
        self.permissions = tuple(permissions)

    def request_permission(self) -> PermissionState:
        results: Dict[str, str] = self.bridge.request_permissions(list(self.permissions))
        missing = [name for name in self.permissions if results.get(name) != "granted"]
        if missing:
            log.info("Android permissions not granted: %s", ", ".join(missing))
            return PermissionState.DENIED
        return PermissionState.GRANTED

    def open_settings(self) -> bool:
        self.bridge.open_app_settings()
        return True


class IosPermissionProvider(PermissionProvider):
    """iOS location authorization (heading updates ride on Core Location)."""

    platform_name = "ios"
    GRANTED_STATUSES = {"authorizedWhenInUse", "authorizedAlways"}

    def __init__(self, bridge: Any) -> None:
        self.bridge = bridge

    def request_permission(self) -> PermissionState:
        status = self.bridge.request_authorization()
        if status in self.GRANTED_STATUSES:
            return PermissionState.GRANTED
        log.info("iOS authorization status: %s", status)
        return PermissionState.DENIED

    def open_settings(self) -> bool:
        return bool(self.bridge.open_settings_url())


class WebPermissionProvider(PermissionProvider):
    """Browsers have no OS permission step for this flow."""

    platform_name = "web"

    def request_permission(self) -> PermissionState:
        return PermissionState.GRANTED

    def open_settings(self) -> bool:
        return False


_PROVIDERS = {
    "android": AndroidPermissionProvider,
    "ios": IosPermissionProvider,
}


def create_permission_provider(platform_name: str, bridge: Optional[Any] = None) -> PermissionProvider:
    """
    Select the permission adapter for a platform.

    Args:
        platform_name: "android", "ios", "web" or "simulated"
        bridge: Platform bridge object (required for android/ios)

    Returns:
        PermissionProvider for the platform

    Raises:
        PlatformError: Unknown platform or missing bridge
    """
    name = platform_name.lower()
    if name in ("web", "simulated"):
        return WebPermissionProvider()
    provider_cls = _PROVIDERS.get(name)
    if provider_cls is None:
        raise PlatformError(f"Unsupported platform '{platform_name}'")
    if bridge is None:
        raise PlatformError(f"Platform '{platform_name}' requires a permission bridge")
    return provider_cls(bridge)
