#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Guidance Controller - Solar Compass

Orchestrates one guidance session: permission, magnetometer subscription,
heading smoothing, alignment classification and user feedback.

Pipeline Flow:
    Permission → SensorSource → HeadingEstimator → AlignmentClassifier →
    Rotation / Haptics → Listeners (presentation)

Lifecycle:
- start(): publishes LOADING, requests permission off the caller's thread,
  subscribes to the sensor only once permission is GRANTED
- stop(): unsubscribes synchronously and invalidates the session, so a late
  callback from the platform never reaches a stopped controller
- retry_permission() / open_settings(): recovery path after a denial

Samples arrive through a single callback channel and are processed to
completion before the next one. The lock serialises lifecycle changes
(start/stop vs. the permission worker) and the final commit of each sample, so a
sample racing stop() cannot overwrite the STOPPED state.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from solarcompass.core.guidance_types import (
    AlignmentState,
    GuidanceSnapshot,
    GuidanceStatus,
    HeadingSample,
    PermissionState,
)
from solarcompass.core.hardware.sensor_source import SensorSource
from solarcompass.core.haptics.haptic_feedback import HapticFeedback, NullHaptics
from solarcompass.core.imu.heading_estimator import HeadingEstimator
from solarcompass.core.navigation.alignment_classifier import AlignmentClassifier, AlignmentReading
from solarcompass.core.navigation.rotation import next_rotation
from solarcompass.core.permissions.permission_manager import PermissionLifecycleManager
from solarcompass.core.telemetry.loggers.guidance_logger import get_guidance_logger
from solarcompass.utils.config_sections import (
    HapticConfig,
    SensorConfig,
    load_haptic_config,
    load_sensor_config,
)

log = logging.getLogger(__name__)

SnapshotListener = Callable[[GuidanceSnapshot], None]


class GuidanceController:
    """
    Wires sensor, estimator, classifier and feedback for one target azimuth.

    Attributes:
        target_azimuth: Fixed target for the session, degrees in [0, 360)
        status: Current lifecycle signal for the presentation layer
        stable_heading: Last StableHeading, None before the first one
        reading: Last AlignmentReading, None before the first one
        rotation_angle: Unwrapped dial rotation target (follows -heading)
    """

    def __init__(
        self,
        target_azimuth: float,
        sensor_source: SensorSource,
        permission_manager: PermissionLifecycleManager,
        haptics: Optional[HapticFeedback] = None,
        estimator: Optional[HeadingEstimator] = None,
        classifier: Optional[AlignmentClassifier] = None,
        sensor_config: Optional[SensorConfig] = None,
        haptic_config: Optional[HapticConfig] = None,
    ) -> None:
        self.target_azimuth = float(target_azimuth)
        self.sensor_source = sensor_source
        self.permission_manager = permission_manager
        self.haptics = haptics or NullHaptics()
        self.estimator = estimator or HeadingEstimator()
        self.classifier = classifier or AlignmentClassifier()
        self.sensor_config = sensor_config or load_sensor_config()
        self.haptic_config = haptic_config or load_haptic_config()

        self.status = GuidanceStatus.IDLE
        self.stable_heading: Optional[float] = None
        self.reading: Optional[AlignmentReading] = None
        self.rotation_angle = 0.0
        self.message: Optional[str] = None

        self._lock = threading.RLock()
        self._listeners: List[SnapshotListener] = []
        self._session_id = 0
        self._session_active = False
        self._handle = None

        guidance_log = get_guidance_logger()
        self._sensor_log = guidance_log.sensor
        self._heading_log = guidance_log.heading
        self._alignment_log = guidance_log.alignment

    # ------------------------------------------------------------------
    # Presentation API
    # ------------------------------------------------------------------
    def add_listener(self, callback: SnapshotListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: SnapshotListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    @property
    def is_running(self) -> bool:
        return self._session_active

    @property
    def distance(self) -> Optional[float]:
        return self.reading.distance if self.reading else None

    @property
    def alignment_state(self) -> Optional[AlignmentState]:
        return self.reading.state if self.reading else None

    def snapshot(self) -> GuidanceSnapshot:
        """Current read-only view for the presentation layer."""
        heading = None
        if self.stable_heading is not None:
            heading = int(round(self.stable_heading)) % 360
        reading = self.reading
        return GuidanceSnapshot(
            status=self.status,
            target_azimuth=self.target_azimuth,
            heading_degrees=heading,
            distance_degrees=int(round(reading.distance)) if reading else None,
            alignment_state=reading.state if reading else None,
            rotation_angle=self.rotation_angle,
            is_aligned=reading.is_aligned if reading else False,
            message=self.message,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin a guidance session. No-op if one is already running."""
        with self._lock:
            if self._session_active:
                return
            self._session_active = True
            self._session_id += 1
            session_id = self._session_id
            self._reset_session_state()
            self.status = GuidanceStatus.LOADING

        self._publish()
        threading.Thread(
            target=self._acquire_sensor,
            args=(session_id, self.permission_manager.request),
            daemon=True,
        ).start()

    def retry_permission(self) -> None:
        """Re-enter PENDING after a denial or a failed platform request."""
        with self._lock:
            if not self._session_active:
                return
            if self.permission_manager.state is not PermissionState.DENIED:
                return
            session_id = self._session_id
            self.status = GuidanceStatus.LOADING
            self.message = None

        self._publish()
        threading.Thread(
            target=self._acquire_sensor,
            args=(session_id, self.permission_manager.retry),
            daemon=True,
        ).start()

    def open_settings(self) -> Optional[str]:
        """Open platform settings. Returns an error message if that failed."""
        error = self.permission_manager.open_settings()
        if error:
            self.message = error
            self._publish()
        return error

    def stop(self) -> None:
        """
        End the session and release the sensor.

        Unsubscribes unconditionally, even while a permission request is still
        in flight; the session id changes so no queued callback is honoured.
        """
        with self._lock:
            if not self._session_active:
                return
            self._session_active = False
            self._session_id += 1
            self._release_subscription()
            self.status = GuidanceStatus.STOPPED

        self._sensor_log.info(
            f"Guidance session stopped after {self.estimator.samples_accepted} samples "
            f"({self.estimator.samples_rejected} rejected)"
        )
        self._publish()

    def __enter__(self) -> "GuidanceController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Internal pipeline
    # ------------------------------------------------------------------
    def _acquire_sensor(self, session_id: int, request: Callable[[], PermissionState]) -> None:
        """Permission request and subscription, run off the caller's thread."""
        try:
            state = request()
        except Exception as e:
            self._fail(session_id, f"Permission request failed: {e}")
            return

        if state is not PermissionState.GRANTED:
            with self._lock:
                if not self._is_current(session_id):
                    return
                self.status = GuidanceStatus.PERMISSION_DENIED
            self._sensor_log.info("Permission denied, sensor not started")
            self._publish()
            return

        with self._lock:
            if not self._is_current(session_id):
                return
            try:
                if not self.sensor_source.is_available():
                    raise RuntimeError("Magnetometer not available")
                self._handle = self.sensor_source.start(
                    lambda sample: self._on_sample(session_id, sample),
                    self.sensor_config.update_interval_ms,
                    on_unavailable=lambda reason: self._fail(session_id, reason),
                )
            except Exception as e:
                self._fail(session_id, f"Sensor unavailable: {e}")
                return
            if self.status is GuidanceStatus.LOADING:
                self.status = GuidanceStatus.ACTIVE

        self._sensor_log.info(
            f"Sensor started every {self.sensor_config.update_interval_ms} ms, "
            f"target {self.target_azimuth:.1f}°"
        )
        self._publish()

    def _on_sample(self, session_id: int, sample: HeadingSample) -> None:
        if not self._is_current(session_id):
            return
        try:
            heading = self.estimator.ingest(sample)
            if heading is None:
                return

            reading = self.classifier.classify(heading, self.target_azimuth)
            with self._lock:
                if not self._is_current(session_id):
                    return
                self.stable_heading = heading
                self.reading = reading
                self.rotation_angle = next_rotation(self.rotation_angle, heading)
                self.status = GuidanceStatus.ACTIVE
            self._heading_log.debug(
                f"heading={heading:.1f}° distance={reading.distance:.1f}° state={reading.state.value}"
            )

            if reading.just_entered:
                self._pulse()
        except Exception as e:
            self._fail(session_id, f"Sample processing failed: {e}")
            return

        self._publish()

    def _pulse(self) -> None:
        if not self.haptic_config.enabled:
            return
        self._alignment_log.info(f"Entered aligned band at {self.stable_heading:.1f}°")
        try:
            self.haptics.pulse(self.haptic_config.pulse_ms)
        except Exception as e:
            self._alignment_log.warning(f"Haptic pulse failed: {e}")

    def _fail(self, session_id: int, reason: str) -> None:
        """Map any platform failure to SENSOR_UNAVAILABLE and stop sampling."""
        with self._lock:
            if not self._is_current(session_id):
                return
            # Keep the session open for stop(), but refuse further samples
            self._session_id += 1
            self._release_subscription()
            self.status = GuidanceStatus.SENSOR_UNAVAILABLE
            self.message = reason
        self._sensor_log.warning(reason)
        self._publish()

    def _release_subscription(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            self.sensor_source.stop(handle)
        except Exception as e:
            self._sensor_log.warning(f"Error releasing sensor subscription: {e}")

    def _is_current(self, session_id: int) -> bool:
        return self._session_active and session_id == self._session_id

    def _reset_session_state(self) -> None:
        self.estimator.reset()
        self.classifier.reset()
        self.stable_heading = None
        self.reading = None
        self.rotation_angle = 0.0
        self.message = None

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception as e:
                log.warning("Guidance listener failed: %s", e)
