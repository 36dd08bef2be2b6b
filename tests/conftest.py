"""Shared fixtures: session logs go to a temporary directory per test."""

from __future__ import annotations

import pytest

from solarcompass.core.telemetry.loggers.guidance_logger import (
    get_guidance_logger,
    reset_guidance_logger,
)


@pytest.fixture(autouse=True)
def guidance_log_dir(tmp_path):
    reset_guidance_logger()
    get_guidance_logger(session_dir=tmp_path / "session")
    yield tmp_path / "session"
    reset_guidance_logger()
