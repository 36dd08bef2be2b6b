#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Solar Compass - guidance session from the command line.

Runs the heading alignment engine against a simulated magnetometer (or the web
platform, which has none) and prints every published snapshot.

Usage:
    solar-compass --target 182
    solar-compass --target 182 --start-heading 90 --duration 8
    solar-compass --target 182 --platform web
"""

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

import numpy as np

from solarcompass.core.guidance_types import GuidanceSnapshot, GuidanceStatus
from solarcompass.core.navigation.builder import GuidanceBuilder
from solarcompass.core.navigation.target_azimuth import parse_target_azimuth
from solarcompass.core.telemetry.loggers.guidance_logger import get_guidance_logger
from solarcompass.utils.config import Config
from solarcompass.utils.ctrl_handler import CtrlCHandler


def build_heading_script(start: float, target: float, steps: int = 40, hold: int = 30) -> List[float]:
    """Turn from start toward target along the short way, then hold."""
    delta = ((target - start + 180.0) % 360.0) - 180.0
    sweep = np.linspace(start, start + delta, steps)
    return [float(h % 360.0) for h in sweep] + [float(target)] * hold


def format_snapshot(snapshot: GuidanceSnapshot) -> str:
    if snapshot.heading_degrees is None:
        line = f"[{snapshot.status.value}] target={snapshot.target_azimuth:.0f}°"
    else:
        label = "aligned" if snapshot.is_aligned else "not aligned"
        line = (
            f"[{snapshot.status.value}] heading={snapshot.heading_degrees:3d}° "
            f"target={snapshot.target_azimuth:.0f}° diff={snapshot.distance_degrees:3d}° "
            f"{snapshot.alignment_state.value:<10} {label} rot={snapshot.rotation_angle:7.1f}"
        )
    if snapshot.message:
        line += f" ({snapshot.message})"
    return line


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Solar panel heading alignment guidance")
    parser.add_argument("--target", default=None, help="Target azimuth in degrees (default 180)")
    parser.add_argument("--platform", default="simulated", choices=["simulated", "web"])
    parser.add_argument("--start-heading", type=float, default=None,
                        help="Simulated starting heading (default target + 90)")
    parser.add_argument("--duration", type=float, default=6.0, help="Seconds to run")
    parser.add_argument("--log-dir", default=None, help="Session log directory")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    get_guidance_logger(Path(args.log_dir) if args.log_dir else None)

    print("=" * 60)
    print("Solar Compass - heading alignment guidance")
    print("=" * 60)

    target = parse_target_azimuth(args.target)
    start = args.start_heading if args.start_heading is not None else target + 90.0

    ctrl_handler = CtrlCHandler()
    controller = GuidanceBuilder(args.platform).build_controller(
        target, simulated_headings=build_heading_script(start, target)
    )
    controller.add_listener(lambda snapshot: print(format_snapshot(snapshot)))

    terminal = {GuidanceStatus.PERMISSION_DENIED, GuidanceStatus.SENSOR_UNAVAILABLE}
    deadline = time.monotonic() + args.duration
    try:
        with controller:
            while time.monotonic() < deadline and not ctrl_handler.should_stop:
                if controller.status in terminal:
                    break
                time.sleep(0.05)
            ended_with = controller.status
    finally:
        ctrl_handler.restore()

    print(f"[INFO] Session ended: {ended_with.value}")
    return 1 if ended_with in terminal else 0


if __name__ == "__main__":
    raise SystemExit(main())
