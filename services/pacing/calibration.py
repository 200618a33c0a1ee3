"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Flat speed calibration.

Total moving time decreases with flat speed, so the flat speed matching a
target moving time is found by bisection over fixed speed bounds.
"""

from __future__ import annotations

import math

import pandas as pd
from streamlit.logger import get_logger

from config import CALIBRATION_ITERATIONS, FLAT_SPEED_BOUNDS_KMH
from services.pacing.errors import InfeasibleTargetError
from services.pacing.speed_model import speed_for_slope
from utils.time import format_hms

logger = get_logger(__name__)


def moving_time_for_flat_speed(
    segments: pd.DataFrame, flat_speed_kmh: float, profile: str, caution: float
) -> float:
    """Sum of lengthKm / speed * 3600 over all segments.

    Returns inf as soon as a resolved speed is non-finite or <= 0, meaning the
    flat speed is infeasible.
    """
    total = 0.0
    for length_m, slope in zip(segments["lengthM"].to_numpy(), segments["slopePct"].to_numpy()):
        speed = speed_for_slope(slope, flat_speed_kmh, profile, caution)
        if not math.isfinite(speed) or speed <= 0:
            return math.inf
        total += (length_m / 1000.0) / speed * 3600.0
    return total


def find_flat_speed_for_target_time(
    segments: pd.DataFrame,
    target_moving_sec: float,
    profile: str,
    caution: float,
    speed_bounds: tuple[float, float] = FLAT_SPEED_BOUNDS_KMH,
    iterations: int = CALIBRATION_ITERATIONS,
) -> float:
    """Fixed-iteration bisection on [vmin, vmax].

    No convergence check and no early exit: exactly `iterations` halvings,
    then the midpoint of the final bracket is returned. A target outside the
    reachable window yields a bound, see `calibrate_flat_speed`.
    """
    lo, hi = float(speed_bounds[0]), float(speed_bounds[1])
    for _ in range(int(iterations)):
        mid = (lo + hi) / 2.0
        t = moving_time_for_flat_speed(segments, mid, profile, caution)
        if t > target_moving_sec:
            # Too slow
            lo = mid
        else:
            hi = mid
    return (lo + hi) / 2.0


def calibrate_flat_speed(
    segments: pd.DataFrame,
    target_moving_sec: float,
    profile: str,
    caution: float,
    speed_bounds: tuple[float, float] = FLAT_SPEED_BOUNDS_KMH,
    iterations: int = CALIBRATION_ITERATIONS,
) -> float:
    """Bisection guarded by a feasibility check on the bounds.

    Raises:
        InfeasibleTargetError: the target is faster than the maximum flat speed
            allows, or slower than the minimum flat speed allows
    """
    vmin, vmax = float(speed_bounds[0]), float(speed_bounds[1])

    fastest = moving_time_for_flat_speed(segments, vmax, profile, caution)
    if fastest > target_moving_sec:
        logger.warning(
            "Target moving time %.0fs below fastest achievable %.0fs", target_moving_sec, fastest
        )
        raise InfeasibleTargetError(
            f"Target moving time {format_hms(target_moving_sec)} is faster than achievable "
            f"at {vmax:g} km/h flat speed ({format_hms(fastest)})"
        )

    slowest = moving_time_for_flat_speed(segments, vmin, profile, caution)
    if slowest < target_moving_sec:
        logger.warning(
            "Target moving time %.0fs above slowest achievable %.0fs", target_moving_sec, slowest
        )
        raise InfeasibleTargetError(
            f"Target moving time {format_hms(target_moving_sec)} is slower than achievable "
            f"at {vmin:g} km/h flat speed ({format_hms(slowest)})"
        )

    flat_speed = find_flat_speed_for_target_time(
        segments, target_moving_sec, profile, caution, (vmin, vmax), iterations
    )
    logger.debug("Calibrated flat speed %.4f km/h after %d iterations", flat_speed, iterations)
    return flat_speed
