"""Tests for GuidanceController lifecycle and pipeline wiring."""

from __future__ import annotations

import math

import pytest

from solarcompass.core.guidance_types import (
    AlignmentState,
    GuidanceStatus,
    HeadingSample,
    PermissionState,
)
from solarcompass.core.haptics.haptic_feedback import NullHaptics
from solarcompass.core.navigation import guidance_controller as controller_module
from solarcompass.core.navigation.guidance_controller import GuidanceController
from solarcompass.core.permissions.permission_manager import PermissionLifecycleManager
from solarcompass.core.permissions.providers import PermissionProvider


class SyncThread:
    def __init__(self, target, args=(), daemon=False):
        self.target = target
        self.args = args
        self.daemon = daemon

    def start(self):
        self.target(*self.args)


class DeferredThread(SyncThread):
    """Holds the work until the test releases it (permission still in flight)."""

    pending = []

    def start(self):
        DeferredThread.pending.append(self)

    def run_now(self):
        self.target(*self.args)


class StubProvider(PermissionProvider):
    platform_name = "stub"

    def __init__(self, answers, settings_result=True):
        self.answers = list(answers)
        self.settings_result = settings_result

    def request_permission(self):
        answer = self.answers.pop(0)
        if callable(answer):
            answer = answer()
        if isinstance(answer, Exception):
            raise answer
        return answer

    def open_settings(self):
        if isinstance(self.settings_result, Exception):
            raise self.settings_result
        return self.settings_result


class StubSensorSource:
    def __init__(self, available=True, start_error=None):
        self.available = available
        self.start_error = start_error
        self.start_calls = []
        self.stopped = []
        self.callback = None
        self.on_unavailable = None

    def is_available(self):
        return self.available

    def start(self, callback, interval_ms, on_unavailable=None):
        if self.start_error:
            raise self.start_error
        self.start_calls.append(interval_ms)
        self.callback = callback
        self.on_unavailable = on_unavailable
        return f"handle-{len(self.start_calls)}"

    def stop(self, handle):
        self.stopped.append(handle)

    def deliver(self, heading):
        rad = math.radians(heading)
        self.callback(HeadingSample(x=40.0 * math.sin(rad), y=40.0 * math.cos(rad), z=-20.0))


@pytest.fixture(autouse=True)
def sync_threads(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(controller_module.threading, "Thread", SyncThread)


def make_controller(answers=(PermissionState.GRANTED,), source=None, target=90.0, settings_result=True):
    source = source or StubSensorSource()
    manager = PermissionLifecycleManager(StubProvider(answers, settings_result))
    haptics = NullHaptics()
    controller = GuidanceController(
        target_azimuth=target,
        sensor_source=source,
        permission_manager=manager,
        haptics=haptics,
    )
    snapshots = []
    controller.add_listener(snapshots.append)
    return controller, source, haptics, snapshots


def test_start_subscribes_after_permission_granted():
    controller, source, _, snapshots = make_controller()
    controller.start()

    assert source.start_calls == [100]
    assert controller.status is GuidanceStatus.ACTIVE
    assert [s.status for s in snapshots] == [GuidanceStatus.LOADING, GuidanceStatus.ACTIVE]
    assert controller.permission_manager.state is PermissionState.GRANTED


def test_samples_publish_heading_distance_and_state():
    controller, source, _, snapshots = make_controller(target=90.0)
    controller.start()
    source.deliver(150.0)

    latest = snapshots[-1]
    assert latest.heading_degrees == 150
    assert latest.distance_degrees == 60
    assert latest.alignment_state is AlignmentState.MISALIGNED
    assert latest.rotation_angle == pytest.approx(-150.0)
    assert latest.is_aligned is False


def test_deadband_jitter_publishes_nothing():
    controller, source, _, snapshots = make_controller()
    controller.start()
    source.deliver(200.0)
    published = len(snapshots)

    for heading in [200.5, 199.6, 201.0, 199.2]:
        source.deliver(heading)
    assert len(snapshots) == published


def test_malformed_sample_is_ignored():
    controller, source, _, snapshots = make_controller()
    controller.start()
    published = len(snapshots)

    source.callback(HeadingSample(x=float("nan"), y=1.0, z=0.0))

    assert len(snapshots) == published
    assert controller.status is GuidanceStatus.ACTIVE


def test_haptic_pulse_once_per_alignment_entry():
    controller, source, haptics, _ = make_controller(target=90.0)
    controller.start()

    for heading in [150.0] * 5 + [90.0] * 5:
        source.deliver(heading)
    assert controller.alignment_state is AlignmentState.ALIGNED
    assert haptics.pulse_count == 1

    for heading in [91.0, 89.0, 92.0, 88.5]:
        source.deliver(heading)
    assert haptics.pulse_count == 1

    for heading in [150.0] * 5 + [90.0] * 5:
        source.deliver(heading)
    assert haptics.pulse_count == 2


def test_permission_denied_never_subscribes():
    controller, source, _, snapshots = make_controller(answers=[PermissionState.DENIED])
    controller.start()

    assert controller.status is GuidanceStatus.PERMISSION_DENIED
    assert snapshots[-1].status is GuidanceStatus.PERMISSION_DENIED
    assert source.start_calls == []


def test_retry_after_denial_starts_sensor():
    controller, source, _, _ = make_controller(
        answers=[PermissionState.DENIED, PermissionState.GRANTED]
    )
    controller.start()
    controller.retry_permission()

    assert controller.status is GuidanceStatus.ACTIVE
    assert source.start_calls == [100]


def test_stop_invalidates_callbacks():
    controller, source, _, snapshots = make_controller()
    controller.start()
    source.deliver(100.0)
    stale_callback = source.callback

    controller.stop()
    published = len(snapshots)
    heading_before = controller.stable_heading

    source.callback = stale_callback
    source.deliver(250.0)

    assert source.stopped == ["handle-1"]
    assert controller.status is GuidanceStatus.STOPPED
    assert len(snapshots) == published
    assert controller.stable_heading == heading_before


def test_stop_while_permission_in_flight(monkeypatch: pytest.MonkeyPatch):
    DeferredThread.pending = []
    monkeypatch.setattr(controller_module.threading, "Thread", DeferredThread)
    controller, source, _, _ = make_controller()

    controller.start()
    assert controller.status is GuidanceStatus.LOADING
    controller.stop()

    # Permission arrives after teardown
    DeferredThread.pending[0].run_now()

    assert source.start_calls == []
    assert controller.status is GuidanceStatus.STOPPED


def test_missing_magnetometer_maps_to_sensor_unavailable():
    controller, source, _, snapshots = make_controller(source=StubSensorSource(available=False))
    controller.start()

    assert controller.status is GuidanceStatus.SENSOR_UNAVAILABLE
    assert snapshots[-1].status is GuidanceStatus.SENSOR_UNAVAILABLE
    assert source.start_calls == []


def test_platform_exception_maps_to_sensor_unavailable():
    source = StubSensorSource(start_error=RuntimeError("bridge exploded"))
    controller, _, _, _ = make_controller(source=source)
    controller.start()

    assert controller.status is GuidanceStatus.SENSOR_UNAVAILABLE
    assert "bridge exploded" in controller.message


def test_permission_bridge_exception_maps_to_sensor_unavailable():
    controller, source, _, _ = make_controller(answers=[OSError("no permission service")])
    controller.start()

    assert controller.status is GuidanceStatus.SENSOR_UNAVAILABLE
    assert source.start_calls == []


def test_permission_bridge_exception_recovers_on_restart():
    controller, source, _, _ = make_controller(
        answers=[OSError("flaky"), PermissionState.GRANTED]
    )
    controller.start()
    assert controller.status is GuidanceStatus.SENSOR_UNAVAILABLE
    assert controller.permission_manager.state is PermissionState.DENIED

    controller.stop()
    controller.start()

    assert controller.status is GuidanceStatus.ACTIVE
    assert controller.permission_manager.state is PermissionState.GRANTED
    assert source.start_calls == [100]


def test_permission_bridge_exception_recovers_on_retry():
    controller, source, _, _ = make_controller(
        answers=[OSError("flaky"), PermissionState.GRANTED]
    )
    controller.start()

    controller.retry_permission()

    assert controller.status is GuidanceStatus.ACTIVE
    assert controller.message is None
    assert source.start_calls == [100]


def test_restart_after_stop_with_permission_in_flight(monkeypatch: pytest.MonkeyPatch):
    DeferredThread.pending = []
    monkeypatch.setattr(controller_module.threading, "Thread", DeferredThread)
    def restart_while_prompt_open():
        # The OS prompt of the first session is still open here
        controller.stop()
        controller.start()
        DeferredThread.pending[1].run_now()
        return PermissionState.GRANTED

    controller, source, _, _ = make_controller(
        answers=[restart_while_prompt_open, PermissionState.GRANTED]
    )

    controller.start()
    DeferredThread.pending[0].run_now()

    assert controller.status is GuidanceStatus.ACTIVE
    assert controller.permission_manager.state is PermissionState.GRANTED
    assert source.start_calls == [100]


def test_subscription_failure_releases_sensor_and_drops_samples():
    controller, source, _, snapshots = make_controller()
    controller.start()
    source.deliver(10.0)

    source.on_unavailable("sensor disconnected")
    published = len(snapshots)
    source.deliver(200.0)

    assert controller.status is GuidanceStatus.SENSOR_UNAVAILABLE
    assert source.stopped == ["handle-1"]
    assert len(snapshots) == published

    controller.stop()
    assert controller.status is GuidanceStatus.STOPPED


def test_listener_errors_are_contained():
    controller, source, _, snapshots = make_controller()

    def broken(_snapshot):
        raise RuntimeError("render failed")

    controller.add_listener(broken)
    controller.start()
    source.deliver(45.0)

    assert snapshots[-1].heading_degrees == 45


def test_open_settings_failure_is_reported_not_fatal():
    controller, _, _, snapshots = make_controller(
        answers=[PermissionState.DENIED], settings_result=OSError("no settings app")
    )
    controller.start()

    error = controller.open_settings()

    assert "no settings app" in error
    assert snapshots[-1].message == error
    assert controller.status is GuidanceStatus.PERMISSION_DENIED


def test_heading_rounds_into_range():
    controller, source, _, snapshots = make_controller(target=0.0)
    controller.start()
    source.deliver(359.7)

    assert snapshots[-1].heading_degrees == 0
    assert snapshots[-1].distance_degrees == 0


def test_context_manager_releases_sensor():
    controller, source, _, _ = make_controller()
    with controller:
        assert controller.is_running
    assert source.stopped == ["handle-1"]
    assert controller.is_running is False


def test_restart_starts_a_fresh_session():
    controller, source, _, _ = make_controller()
    controller.start()
    source.deliver(300.0)
    controller.stop()

    controller.start()
    assert controller.stable_heading is None
    assert controller.reading is None
    # Permission stays granted, so the second session subscribes straight away
    assert source.start_calls == [100, 100]
    assert controller.status is GuidanceStatus.ACTIVE


def test_stop_logs_session_sample_counts(guidance_log_dir):
    controller, source, _, _ = make_controller()
    controller.start()
    source.deliver(10.0)
    source.deliver(40.0)
    controller.stop()

    sensor_log = (guidance_log_dir / "sensor.log").read_text()
    assert "stopped after 2 samples (0 rejected)" in sensor_log
