"""Tests for MagnetometerSensorSource using a stubbed platform bridge."""

from __future__ import annotations

import math

import pytest

from solarcompass.core.errors import SensorUnavailableError
from solarcompass.core.hardware.sensor_source import (
    MagnetometerSensorSource,
    UnavailableSensorSource,
)


class StubMagnetometer:
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.interval = None
        self.listeners = {}
        self.unsubscribed = []
        self._next = 0

    def is_available(self):
        return self.available

    def set_update_interval(self, ms):
        self.interval = ms

    def subscribe(self, listener):
        self._next += 1
        handle = f"sub-{self._next}"
        self.listeners[handle] = listener
        return handle

    def unsubscribe(self, handle):
        self.unsubscribed.append(handle)

    def fire(self, payload):
        # Platforms may still call listeners that were removed moments ago
        for listener in list(self.listeners.values()):
            listener(payload)


def test_start_sets_interval_and_forwards_samples():
    bridge = StubMagnetometer()
    source = MagnetometerSensorSource(bridge)
    received = []

    handle = source.start(received.append, interval_ms=150)
    bridge.fire({"x": 1.0, "y": 2.0, "z": 3.0})

    assert bridge.interval == 150
    assert source.active_subscriptions == 1
    assert received[0].x == 1.0 and received[0].y == 2.0 and received[0].z == 3.0
    assert handle is not None


def test_missing_axis_is_forwarded_as_none():
    bridge = StubMagnetometer()
    source = MagnetometerSensorSource(bridge)
    received = []
    source.start(received.append, interval_ms=100)

    bridge.fire({"x": 1.0, "y": math.nan})

    assert received[0].z is None
    assert math.isnan(received[0].y)


def test_stop_invalidates_handle_even_if_bridge_fires_late():
    bridge = StubMagnetometer()
    source = MagnetometerSensorSource(bridge)
    received = []
    handle = source.start(received.append, interval_ms=100)

    source.stop(handle)
    bridge.fire({"x": 1.0, "y": 1.0, "z": 1.0})

    assert received == []
    assert bridge.unsubscribed == ["sub-1"]
    assert source.active_subscriptions == 0


def test_stop_twice_is_harmless():
    bridge = StubMagnetometer()
    source = MagnetometerSensorSource(bridge)
    handle = source.start(lambda _s: None, interval_ms=100)
    source.stop(handle)
    source.stop(handle)
    assert bridge.unsubscribed == ["sub-1"]


def test_failure_payload_reports_unavailable():
    bridge = StubMagnetometer()
    source = MagnetometerSensorSource(bridge)
    reasons = []
    received = []
    source.start(received.append, interval_ms=100, on_unavailable=reasons.append)

    bridge.fire({"error": "sensor disconnected"})
    bridge.fire(None)

    assert reasons == ["sensor disconnected", "sensor signal lost"]
    assert received == []


def test_start_without_magnetometer_raises():
    source = MagnetometerSensorSource(StubMagnetometer(available=False))
    with pytest.raises(SensorUnavailableError):
        source.start(lambda _s: None, interval_ms=100)


def test_unavailable_source():
    source = UnavailableSensorSource()
    assert source.is_available() is False
    with pytest.raises(SensorUnavailableError):
        source.start(lambda _s: None, interval_ms=100)
    source.stop(None)
