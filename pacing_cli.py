"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Command line pacing plan from a GPX file.

Usage:
    python pacing_cli.py race.gpx --target 24:00 --profile trained --caution 0.5 \
        --cp 42.5,10 --cp 80,20 --rest 2,15 --out plan.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from streamlit.logger import get_logger

from config import (
    CALIBRATION_ITERATIONS,
    DEFAULT_CAUTION,
    DEFAULT_PROFILE,
    DEFAULT_RESAMPLE_STEP_M,
    DEFAULT_SMOOTHING_WINDOW,
    FLAT_SPEED_BOUNDS_KMH,
    PROFILES,
)
from services.pacing.errors import PacingError
from services.pacing.models import PacingRequest, RestPeriods
from services.pacing_presenter import build_result_payload
from services.pacing_service import compute_pacing
from utils.coercion import parse_checkpoint, parse_rest
from utils.gpx_parser import parse_gpx_points

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Terrain-aware pacing plan from a GPX track",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("gpx", help="Path to the GPX file")
    parser.add_argument("--target", required=True, help="Target finish time, HH:MM or HH:MM:SS")
    parser.add_argument("--profile", default=DEFAULT_PROFILE, choices=PROFILES, help="Runner profile")
    parser.add_argument(
        "--caution",
        "--prudence",
        dest="caution",
        type=float,
        default=DEFAULT_CAUTION,
        help="0 (optimistic) to 1 (conservative)",
    )
    parser.add_argument("--step", type=float, default=DEFAULT_RESAMPLE_STEP_M, help="Resample step in meters")
    parser.add_argument(
        "--smooth", type=int, default=DEFAULT_SMOOTHING_WINDOW, help="Odd elevation smoothing window"
    )
    parser.add_argument(
        "--cp",
        action="append",
        default=[],
        metavar="KM,MIN",
        help="Checkpoint position (km) and stop (minutes); repeatable",
    )
    parser.add_argument(
        "--rest", "--sleep", dest="rest", metavar="COUNT,MIN", help="Rest periods: count and minutes each"
    )
    parser.add_argument("--vmin", type=float, default=FLAT_SPEED_BOUNDS_KMH[0], help="Min flat speed (km/h)")
    parser.add_argument("--vmax", type=float, default=FLAT_SPEED_BOUNDS_KMH[1], help="Max flat speed (km/h)")
    parser.add_argument(
        "--iters", type=int, default=CALIBRATION_ITERATIONS, help="Bisection iterations (>= 10)"
    )
    parser.add_argument("--out", help="Write the JSON plan to this file instead of stdout")
    return parser


def request_from_args(args: argparse.Namespace) -> PacingRequest:
    checkpoints = tuple(parse_checkpoint(text) for text in args.cp)
    rest = parse_rest(args.rest) if args.rest else RestPeriods()
    return PacingRequest(
        target_time=args.target,
        profile=args.profile,
        caution=args.caution,
        checkpoints=checkpoints,
        rest=rest,
        resample_step_m=args.step,
        smoothing_window=args.smooth,
        flat_speed_bounds_kmh=(args.vmin, args.vmax),
        iterations=args.iters,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    gpx_path = Path(args.gpx)

    try:
        request = request_from_args(args)
        gpx_bytes = gpx_path.read_bytes()
        points = parse_gpx_points(gpx_bytes)
        result = compute_pacing(points, request)
    except PacingError as e:
        logger.warning("Pacing failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: cannot read {gpx_path}: {e}", file=sys.stderr)
        return 1

    payload = build_result_payload(result, source_name=gpx_path.name)
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
        print(f"Wrote {args.out}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
