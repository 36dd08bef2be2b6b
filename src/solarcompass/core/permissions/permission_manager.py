"""
Permission lifecycle for magnetometer access.

State machine:
    UNKNOWN --request--> PENDING
    PENDING --granted--> GRANTED   (terminal for the session)
    PENDING --denied---> DENIED
    PENDING --error----> DENIED    (the bridge raised)
    DENIED  --retry----> PENDING

A request made while PENDING asks the platform again without a second
transition; a session stopped with the OS prompt open can be restarted.

The sensor may only start while the state is GRANTED. Opening the platform
settings is best effort: a failure is reported, never raised, because the user
can still enter coordinates manually elsewhere in the app.
"""

import logging
from typing import Callable, List, Optional

from solarcompass.core.errors import PermissionTransitionError
from solarcompass.core.guidance_types import PermissionState
from solarcompass.core.permissions.providers import PermissionProvider
from solarcompass.core.telemetry.loggers.guidance_logger import get_guidance_logger

log = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS = {
    PermissionState.UNKNOWN: {PermissionState.PENDING},
    PermissionState.PENDING: {PermissionState.GRANTED, PermissionState.DENIED},
    PermissionState.DENIED: {PermissionState.PENDING},
    PermissionState.GRANTED: set(),
}


class PermissionLifecycleManager:
    """Track and drive the permission state for one guidance session."""

    def __init__(self, provider: PermissionProvider) -> None:
        self.provider = provider
        self.state = PermissionState.UNKNOWN
        self._listeners: List[Callable[[PermissionState], None]] = []
        self._log = get_guidance_logger().permission

    @property
    def can_start_sensor(self) -> bool:
        return self.state is PermissionState.GRANTED

    def add_listener(self, callback: Callable[[PermissionState], None]) -> None:
        self._listeners.append(callback)

    def request(self) -> PermissionState:
        """
        Ask the platform for permission.

        Returns immediately with GRANTED if already granted. From UNKNOWN or
        DENIED the state passes through PENDING while the platform answers.

        Raises:
            PermissionTransitionError: The provider answered something other
                than GRANTED or DENIED; the state becomes DENIED
            Exception: Whatever the platform bridge raised; the state becomes DENIED
        """
        if self.state is PermissionState.GRANTED:
            return self.state

        if self.state is not PermissionState.PENDING:
            self._transition(PermissionState.PENDING)
        try:
            result = self.provider.request_permission()
            if result not in (PermissionState.GRANTED, PermissionState.DENIED):
                raise PermissionTransitionError(f"Provider returned unexpected state {result}")
        except Exception as e:
            self._log.warning(f"Permission request failed: {e}")
            self._settle(PermissionState.DENIED)
            raise
        self._settle(result)
        return self.state

    def retry(self) -> PermissionState:
        """Request again after a denial (typically after visiting settings)."""
        if self.state is not PermissionState.DENIED:
            raise PermissionTransitionError(f"Cannot retry from {self.state.value}")
        return self.request()

    def open_settings(self) -> Optional[str]:
        """
        Open the platform settings surface.

        Returns:
            None on success, otherwise a user-facing error message
        """
        try:
            opened = self.provider.open_settings()
        except Exception as e:
            self._log.warning(f"Opening settings failed: {e}")
            return f"Could not open settings: {e}"
        if not opened:
            self._log.warning(f"Settings not available on {self.provider.platform_name}")
            return "Settings are not available on this platform"
        self._log.info("Opened platform settings")
        return None

    def _settle(self, result: PermissionState) -> None:
        # An overlapping request may already have answered
        if self.state is PermissionState.PENDING:
            self._transition(result)

    def _transition(self, new_state: PermissionState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise PermissionTransitionError(
                f"Invalid permission transition {self.state.value} -> {new_state.value}"
            )
        self._log.info(f"Permission {self.state.value} -> {new_state.value}")
        self.state = new_state
        for callback in list(self._listeners):
            try:
                callback(new_state)
            except Exception as e:
                log.warning("Permission listener failed: %s", e)
