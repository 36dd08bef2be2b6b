"""Tests for the session-scoped guidance logger."""

from __future__ import annotations

from solarcompass.core.telemetry.loggers.guidance_logger import (
    GuidanceLogger,
    get_guidance_logger,
    reset_guidance_logger,
)


def test_singleton_writes_per_subsystem_files(guidance_log_dir):
    guidance_log = get_guidance_logger()
    assert guidance_log is GuidanceLogger()
    assert guidance_log.log_dir == guidance_log_dir

    guidance_log.heading.debug("stable heading 181.0")
    guidance_log.permission.info("granted")
    for handler in guidance_log.heading.handlers + guidance_log.permission.handlers:
        handler.flush()

    assert "stable heading 181.0" in (guidance_log_dir / "heading.log").read_text()
    assert "granted" in (guidance_log_dir / "permission.log").read_text()
    assert (guidance_log_dir / "sensor.log").exists()
    assert (guidance_log_dir / "alignment.log").exists()


def test_reset_starts_new_session(tmp_path):
    first = get_guidance_logger()
    reset_guidance_logger()

    second = get_guidance_logger(session_dir=tmp_path / "next")

    assert second is not first
    assert second.log_dir == tmp_path / "next"
    assert (tmp_path / "next" / "heading.log").exists()
