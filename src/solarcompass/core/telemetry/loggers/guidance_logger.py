"""
Per-session log files for a guidance run.

One directory per session, one file per subsystem:

    sensor.log      subscribe / unsubscribe, unavailability, sample counts
    heading.log     StableHeading updates
    alignment.log   band entries and haptic pulses
    permission.log  permission transitions and settings launches

Files take everything from DEBUG up; only warnings reach the console so the
CLI output stays readable. Components fetch the shared instance with
get_guidance_logger() and write to the attribute for their subsystem, e.g.
``get_guidance_logger().heading.debug(...)``. Tests point it at a temporary
directory and call reset_guidance_logger() between sessions.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

LOGGER_NAMES = ("sensor", "heading", "alignment", "permission")

_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s"
_DATEFMT = "%H:%M:%S"


class GuidanceLogger:
    """Singleton logger for guidance session debugging."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Optional[Path] = None):
        if self._initialized:
            return

        if session_dir is None:
            from solarcompass.utils.config import Config

            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_dir = Path(getattr(Config, "LOG_DIR", "logs")) / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)

        for name in LOGGER_NAMES:
            setattr(self, name, self._open(name))

        self._initialized = True

    def _open(self, name: str) -> logging.Logger:
        logger = logging.getLogger(f"guidance.{name}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        # Loggers outlive a session; drop handlers pointing at an older directory
        logger.handlers.clear()

        formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)
        for handler, level in (
            (logging.FileHandler(self.log_dir / f"{name}.log", mode="w"), logging.DEBUG),
            (logging.StreamHandler(), logging.WARNING),
        ):
            handler.setLevel(level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger

    def close(self):
        """Detach and close the file and console handlers of every subsystem."""
        for name in LOGGER_NAMES:
            logger = getattr(self, name, None)
            if logger:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)


_guidance_logger = None


def get_guidance_logger(session_dir: Optional[Path] = None) -> GuidanceLogger:
    """Get or create guidance logger instance."""
    global _guidance_logger
    if _guidance_logger is None:
        _guidance_logger = GuidanceLogger(session_dir=session_dir)
    return _guidance_logger


def reset_guidance_logger() -> None:
    """Close and forget the current instance so the next session starts fresh."""
    global _guidance_logger
    if _guidance_logger is not None:
        _guidance_logger.close()
    _guidance_logger = None
    GuidanceLogger._instance = None
    GuidanceLogger._initialized = False
