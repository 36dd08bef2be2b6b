"""
Alignment feedback backends.

A HapticFeedback backend fires a short pulse when the heading enters the
aligned band. Pulses are fire-and-forget: nothing is returned and failures are
logged, never raised into the guidance pipeline.

Backends:
- DeviceHaptics: forwards to the phone's vibration motor through the bridge
- AudioPulseHaptics: desktop stand-in, a short low tone via sounddevice
- NullHaptics: feedback disabled
"""

import logging
import threading
from typing import Any, Optional

import numpy as np

from solarcompass.core.telemetry.loggers.guidance_logger import get_guidance_logger
from solarcompass.utils.config_sections import HapticConfig, load_haptic_config

log = logging.getLogger(__name__)

# PortAudio is a system library; sounddevice raises OSError when it is missing
try:
    import sounddevice as sd
except (ImportError, OSError) as e:
    sd = None
    log.warning("sounddevice unavailable (%s). Audio pulses will be disabled.", e)


class HapticFeedback:
    """Capability to fire a single feedback pulse."""

    def __init__(self) -> None:
        self.pulse_count = 0

    def pulse(self, duration_ms: int) -> None:
        raise NotImplementedError


class NullHaptics(HapticFeedback):
    def pulse(self, duration_ms: int) -> None:
        self.pulse_count += 1


class DeviceHaptics(HapticFeedback):
    """Phone vibration motor. Bridge exposes vibrate(duration_ms)."""

    def __init__(self, bridge: Any) -> None:
        super().__init__()
        self.bridge = bridge
        self._log = get_guidance_logger().alignment

    def pulse(self, duration_ms: int) -> None:
        try:
            self.bridge.vibrate(int(duration_ms))
            self.pulse_count += 1
        except Exception as e:
            self._log.warning(f"Haptic pulse failed: {e}")


class AudioPulseHaptics(HapticFeedback):
    """Short tone on the desktop speakers, played in a background thread."""

    SAMPLE_RATE = 44100

    def __init__(self, config: Optional[HapticConfig] = None) -> None:
        super().__init__()
        self.config = config or load_haptic_config()
        self._log = get_guidance_logger().alignment

    @property
    def enabled(self) -> bool:
        return sd is not None and self.config.enabled

    def pulse(self, duration_ms: int) -> None:
        if not self.enabled:
            return
        self.pulse_count += 1
        threading.Thread(target=self._play, args=(duration_ms,), daemon=True).start()

    def build_tone(self, duration_ms: int) -> np.ndarray:
        """Mono tone with 5 ms fades so the pulse does not click."""
        duration = max(duration_ms, 1) / 1000.0
        t = np.linspace(0, duration, int(self.SAMPLE_RATE * duration), False)
        tone = np.sin(2 * np.pi * self.config.tone_frequency * t)

        fade_samples = int(self.SAMPLE_RATE * 0.005)
        if len(tone) > fade_samples * 2:
            tone[:fade_samples] *= np.linspace(0, 1, fade_samples)
            tone[-fade_samples:] *= np.linspace(1, 0, fade_samples)
        return (tone * self.config.tone_volume).astype(np.float32)

    def _play(self, duration_ms: int) -> None:
        try:
            sd.play(self.build_tone(duration_ms), samplerate=self.SAMPLE_RATE, blocking=False)
        except Exception as e:
            self._log.warning(f"Failed to play audio pulse with sounddevice: {e}")
