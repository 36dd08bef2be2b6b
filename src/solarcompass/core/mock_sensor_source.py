"""
Simulated magnetometer for development without a phone.

This module provides a drop-in SensorSource that synthesises magnetometer
vectors from a scripted heading sequence, so the whole guidance pipeline can
run on a desktop. Vectors follow the engine's convention heading = atan2(x, y):
    x = B * sin(heading), y = B * cos(heading)
with Gaussian heading noise added per sample.

Operating modes:
- Background: start() launches a daemon thread that emits one sample per
  interval, walking through the heading script (looping at the end)
- Manual: emit_heading() / emit() deliver synchronously to the active
  subscriptions, which is what tests use

Usage:
    source = SimulatedSensorSource(headings=np.linspace(90, 200, 50))
    handle = source.start(on_sample, interval_ms=100)
"""

import logging
import math
import threading
import time
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from solarcompass.core.errors import SensorUnavailableError
from solarcompass.core.guidance_types import HeadingSample
from solarcompass.core.hardware.sensor_source import SampleCallback, SensorSource, UnavailableCallback
from solarcompass.utils.config_sections import SimulationConfig, load_simulation_config

log = logging.getLogger("SimulatedSensorSource")


class SimulatedSensorSource(SensorSource):
    """Scripted magnetometer for desktop sessions and tests."""

    def __init__(
        self,
        headings: Optional[Iterable[float]] = None,
        config: Optional[SimulationConfig] = None,
        seed: Optional[int] = None,
        available: bool = True,
    ) -> None:
        self.config = config or load_simulation_config()
        self.headings = [float(h) for h in (headings if headings is not None else [0.0])]
        if not self.headings:
            raise ValueError("headings must not be empty")
        self.available = available
        self._rng = np.random.default_rng(seed)

        self._lock = threading.Lock()
        self._subscriptions: Dict[int, Tuple[SampleCallback, Optional[UnavailableCallback]]] = {}
        self._threads: Dict[int, threading.Event] = {}
        self._next_id = 0
        self._script_index = 0

        self.samples_emitted = 0

    def is_available(self) -> bool:
        return self.available

    def start(self, callback, interval_ms, on_unavailable=None, background: bool = True):
        if not self.available:
            raise SensorUnavailableError("Simulated magnetometer disabled")

        with self._lock:
            self._next_id += 1
            sub_id = self._next_id
            self._subscriptions[sub_id] = (callback, on_unavailable)

        if background:
            stop_event = threading.Event()
            self._threads[sub_id] = stop_event
            threading.Thread(
                target=self._run,
                args=(sub_id, interval_ms / 1000.0, stop_event),
                daemon=True,
            ).start()

        log.info("Simulated magnetometer started (sub %d, %d ms)", sub_id, interval_ms)
        return sub_id

    def stop(self, handle):
        with self._lock:
            self._subscriptions.pop(handle, None)
        stop_event = self._threads.pop(handle, None)
        if stop_event is not None:
            stop_event.set()

    def _run(self, sub_id: int, interval_s: float, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            heading = self.headings[self._script_index % len(self.headings)]
            self._script_index += 1
            self._deliver(sub_id, self.vector_for(heading))
            stop_event.wait(interval_s)

    def vector_for(self, heading: float, noisy: bool = True) -> HeadingSample:
        """Magnetometer vector that reads as the given heading."""
        if noisy and self.config.noise_deg > 0:
            heading = heading + float(self._rng.normal(0.0, self.config.noise_deg))
        rad = math.radians(heading)
        strength = self.config.field_strength
        return HeadingSample(
            x=strength * math.sin(rad),
            y=strength * math.cos(rad),
            z=-strength * 0.8,
            timestamp=time.monotonic(),
        )

    def emit_heading(self, heading: float, noisy: bool = False) -> None:
        """Deliver one sample for the heading to every active subscription."""
        self.emit(self.vector_for(heading, noisy=noisy))

    def emit(self, sample: HeadingSample) -> None:
        with self._lock:
            sub_ids = list(self._subscriptions)
        for sub_id in sub_ids:
            self._deliver(sub_id, sample)

    def fail(self, reason: str = "simulated sensor failure") -> None:
        """Report a subscription failure to every active subscription."""
        with self._lock:
            handlers = [on_unavailable for _, on_unavailable in self._subscriptions.values()]
        for on_unavailable in handlers:
            if on_unavailable is not None:
                on_unavailable(reason)

    def _deliver(self, sub_id: int, sample: HeadingSample) -> None:
        with self._lock:
            entry = self._subscriptions.get(sub_id)
        if entry is None:
            return
        self.samples_emitted += 1
        entry[0](sample)

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)
