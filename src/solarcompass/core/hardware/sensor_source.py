"""
Magnetometer access for the guidance engine.

This module wraps the platform magnetometer behind a small SensorSource
capability so the controller never branches on the operating system:
- Availability check
- Subscription at a fixed update interval
- Unsubscription that invalidates the handle immediately

Once stop() returns, no further sample is forwarded for that handle, even if
the platform bridge fires a late callback.

Bridge (supplied by the host application):
    is_available() -> bool
    set_update_interval(ms) -> None
    subscribe(listener) -> handle      listener receives {"x", "y", "z"} dicts,
                                       or None / {"error": ...} on failure
    unsubscribe(handle) -> None

Usage:
    source = MagnetometerSensorSource(bridge)
    if source.is_available():
        handle = source.start(on_sample, interval_ms=100, on_unavailable=on_lost)
        ...
        source.stop(handle)
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from solarcompass.core.errors import SensorUnavailableError
from solarcompass.core.guidance_types import HeadingSample
from solarcompass.core.telemetry.loggers.guidance_logger import get_guidance_logger

log = logging.getLogger(__name__)

SampleCallback = Callable[[HeadingSample], None]
UnavailableCallback = Callable[[str], None]


class SensorSource:
    """Capability to stream magnetometer samples."""

    def is_available(self) -> bool:
        raise NotImplementedError

    def start(
        self,
        callback: SampleCallback,
        interval_ms: int,
        on_unavailable: Optional[UnavailableCallback] = None,
    ) -> Any:
        """Begin delivering samples to callback. Returns a subscription handle."""
        raise NotImplementedError

    def stop(self, handle: Any) -> None:
        """Invalidate handle; no callback fires for it afterwards."""
        raise NotImplementedError


class MagnetometerSensorSource(SensorSource):
    """Platform magnetometer (Android and iOS share the same bridge shape)."""

    def __init__(self, bridge: Any) -> None:
        self.bridge = bridge
        self._active: Dict[int, Any] = {}
        self._next_id = 0
        self._log = get_guidance_logger().sensor

    def is_available(self) -> bool:
        return bool(self.bridge.is_available())

    def start(self, callback, interval_ms, on_unavailable=None):
        if not self.is_available():
            raise SensorUnavailableError("Magnetometer not available on this device")

        self._next_id += 1
        sub_id = self._next_id

        def _listener(payload: Optional[Dict[str, Any]]) -> None:
            if sub_id not in self._active:
                return
            if payload is None or "error" in payload:
                reason = (payload or {}).get("error", "sensor signal lost")
                self._log.warning(f"Magnetometer reported failure: {reason}")
                if on_unavailable is not None:
                    on_unavailable(str(reason))
                return
            callback(HeadingSample(
                x=payload.get("x"),
                y=payload.get("y"),
                z=payload.get("z"),
                timestamp=payload.get("timestamp", time.monotonic()),
            ))

        self.bridge.set_update_interval(interval_ms)
        # Registered before subscribing so a synchronous first delivery is not lost
        self._active[sub_id] = None
        try:
            self._active[sub_id] = self.bridge.subscribe(_listener)
        except Exception:
            self._active.pop(sub_id, None)
            raise
        self._log.info(f"Subscribed to magnetometer every {interval_ms} ms (sub {sub_id})")
        return sub_id

    def stop(self, handle):
        if handle not in self._active:
            return
        platform_handle = self._active.pop(handle)
        try:
            self.bridge.unsubscribe(platform_handle)
            self._log.info(f"Unsubscribed from magnetometer (sub {handle})")
        except Exception as e:
            # The handle is already invalid on our side, so nothing leaks through
            self._log.warning(f"Error during unsubscribe: {e}")

    @property
    def active_subscriptions(self) -> int:
        return len(self._active)


class UnavailableSensorSource(SensorSource):
    """Platforms without a magnetometer (the web build)."""

    def __init__(self, reason: str = "Compass is not available on this platform") -> None:
        self.reason = reason

    def is_available(self) -> bool:
        return False

    def start(self, callback, interval_ms, on_unavailable=None):
        raise SensorUnavailableError(self.reason)

    def stop(self, handle):
        pass
