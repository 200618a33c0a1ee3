"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Per-segment detail and per-km / per-stage aggregation.

Every time total is a sum of rounded per-segment seconds, so tables add up
exactly to what is displayed segment by segment. Average speeds and paces are
always total distance over total time.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
import pandas as pd
from streamlit.logger import get_logger

from config import BOUNDARY_DEDUP_KM, CHECKPOINT_MATCH_KM, EFFORT_GAIN_M_PER_KM
from services.pacing.models import Checkpoint
from services.pacing.speed_model import speed_for_slope
from utils.elevation import elevation_gain_loss
from utils.formatting import format_pace_min_km, pace_from_totals
from utils.slope_classification import classify_slope
from utils.time import minutes_to_seconds

logger = get_logger(__name__)

PER_KM_COLUMNS = [
    "km",
    "segmentsCount",
    "distanceKm",
    "timeSec",
    "avgSpeedKmh",
    "avgPace",
    "avgSlopePct",
    "gainM",
    "lossM",
]

STAGE_COLUMNS = [
    "index",
    "fromKm",
    "toKm",
    "distanceKm",
    "gainM",
    "lossM",
    "movingSec",
    "stopSec",
    "totalSec",
    "avgSpeedKmh",
    "avgPace",
]


def _avg_speed_kmh(distance_km: float, time_sec: float) -> float:
    if distance_km <= 0 or time_sec <= 0:
        return 0.0
    return distance_km / (time_sec / 3600.0)


def raw_gain_loss(elevations: Sequence[float]) -> tuple[float, float]:
    """D+/D- over every original point (no smoothing, no resampling)."""
    return elevation_gain_loss(elevations)


def detail_segments(
    segments: pd.DataFrame, flat_speed_kmh: float, profile: str, caution: float
) -> pd.DataFrame:
    """Apply the speed model to each segment at the calibrated flat speed.

    Adds gainM, lossM, speedKmh, pace, timeSecExact, timeSec (rounded int)
    and slopeClass.
    """
    df = segments.copy()
    if df.empty:
        for col in ("gainM", "lossM", "speedKmh", "timeSecExact"):
            df[col] = pd.Series(dtype=float)
        df["pace"] = pd.Series(dtype=object)
        df["timeSec"] = pd.Series(dtype=int)
        df["slopeClass"] = pd.Series(dtype=object)
        return df

    speeds = np.array(
        [speed_for_slope(s, flat_speed_kmh, profile, caution) for s in df["slopePct"].to_numpy()],
        dtype=float,
    )
    exact = (df["lengthM"].to_numpy(dtype=float) / 1000.0) / speeds * 3600.0
    delta = df["deltaElevM"].to_numpy(dtype=float)

    df["gainM"] = np.where(delta > 0, delta, 0.0)
    df["lossM"] = np.where(delta < 0, -delta, 0.0)
    df["speedKmh"] = speeds
    df["pace"] = [format_pace_min_km(v) for v in speeds]
    df["timeSecExact"] = exact
    df["timeSec"] = [int(round(t)) for t in exact]
    df["slopeClass"] = [classify_slope(s) for s in df["slopePct"].to_numpy()]
    return df


def group_per_km(detailed: pd.DataFrame) -> pd.DataFrame:
    """Bucket segments by the kilometer of their midpoint.

    Returns:
        DataFrame with one row per non-empty kilometer (km is 1-based)
    """
    if detailed.empty:
        return pd.DataFrame(columns=PER_KM_COLUMNS)

    df = detailed.copy()
    df["kmIndex"] = np.floor((df["fromM"] + df["toM"]) / 2.0 / 1000.0).astype(int)
    df["weightedSlope"] = df["slopePct"] * df["lengthM"] / 1000.0

    rows = []
    for km_index, bucket in df.groupby("kmIndex", sort=True):
        distance_km = float(bucket["lengthM"].sum()) / 1000.0
        time_sec = int(bucket["timeSec"].sum())
        avg_speed = _avg_speed_kmh(distance_km, time_sec)
        avg_slope = float(bucket["weightedSlope"].sum()) / distance_km if distance_km > 0 else 0.0
        rows.append(
            {
                "km": int(km_index) + 1,
                "segmentsCount": len(bucket),
                "distanceKm": distance_km,
                "timeSec": time_sec,
                "avgSpeedKmh": avg_speed,
                "avgPace": pace_from_totals(time_sec, distance_km),
                "avgSlopePct": avg_slope,
                "gainM": int(round(bucket["gainM"].sum())),
                "lossM": int(round(bucket["lossM"].sum())),
            }
        )
    return pd.DataFrame(rows, columns=PER_KM_COLUMNS)


def stage_boundaries(checkpoint_kms: Sequence[float], total_km: float) -> list[float]:
    """Sorted [0, checkpoints..., total], dropping values within the dedup
    tolerance of the previously kept boundary."""
    ordered = sorted([0.0, *[float(k) for k in checkpoint_kms], float(total_km)])
    unique: list[float] = []
    for b in ordered:
        if not unique or abs(unique[-1] - b) > BOUNDARY_DEDUP_KM:
            unique.append(b)
    return unique


def checkpoint_for_stage_end(
    checkpoints: Sequence[Checkpoint], to_km: float
) -> Checkpoint | None:
    # First match wins; callers pass checkpoints sorted by position
    for cp in checkpoints:
        if abs(cp.position_km - to_km) < CHECKPOINT_MATCH_KM:
            return cp
    return None


def build_stages(
    detailed: pd.DataFrame,
    points: pd.DataFrame,
    boundaries: Sequence[float],
    checkpoints: Sequence[Checkpoint],
    elevation_col: str = "elevationFilledM",
) -> pd.DataFrame:
    """Split the course into stages between consecutive boundaries.

    Segments belong to a stage when their midpoint is in [from, to). Stage
    D+/D- is recomputed on the original points whose cumulative distance lies
    in [from, to] (inclusive), independently of the segment gain/loss.

    Args:
        detailed: Output of `detail_segments`
        points: Conditioned track with cumulativeDistanceM and elevation_col
        boundaries: Output of `stage_boundaries` (km)
        checkpoints: User checkpoints in any order, sorted by position for
            stop attribution

    Returns:
        DataFrame with STAGE_COLUMNS, index is 1-based
    """
    if len(boundaries) < 2:
        return pd.DataFrame(columns=STAGE_COLUMNS)

    sorted_checkpoints = sorted(checkpoints, key=lambda c: float(c.position_km))
    cum_km = points["cumulativeDistanceM"].to_numpy(dtype=float) / 1000.0
    ele = points[elevation_col].to_numpy(dtype=float)
    mid_m = ((detailed["fromM"] + detailed["toM"]) / 2.0).to_numpy(dtype=float)

    rows = []
    for i in range(len(boundaries) - 1):
        from_km = boundaries[i]
        to_km = boundaries[i + 1]
        from_m = from_km * 1000.0
        to_m = to_km * 1000.0

        in_window = (cum_km >= from_km) & (cum_km <= to_km)
        gain, loss = elevation_gain_loss(ele[in_window])

        mask = (mid_m >= from_m) & (mid_m < to_m)
        stage_segments = detailed.loc[mask]
        distance_km = float(stage_segments["lengthM"].sum()) / 1000.0
        moving_sec = int(stage_segments["timeSec"].sum())

        cp = checkpoint_for_stage_end(sorted_checkpoints, to_km)
        stop_sec = minutes_to_seconds(cp.stop_minutes) if cp is not None else 0

        total_sec = moving_sec + stop_sec
        rows.append(
            {
                "index": i + 1,
                "fromKm": from_km,
                "toKm": to_km,
                "distanceKm": distance_km,
                "gainM": int(round(gain)),
                "lossM": int(round(loss)),
                "movingSec": moving_sec,
                "stopSec": stop_sec,
                "totalSec": total_sec,
                "avgSpeedKmh": _avg_speed_kmh(distance_km, moving_sec),
                "avgPace": pace_from_totals(moving_sec, distance_km),
            }
        )

    stages = pd.DataFrame(rows, columns=STAGE_COLUMNS)
    logger.debug("Built %d stages from %d boundaries", len(stages), len(boundaries))
    return stages


def compute_totals(
    *,
    total_distance_m: float,
    target_total_sec: int,
    checkpoint_stop_sec: int,
    rest_stop_sec: int,
    detailed: pd.DataFrame,
    stages: pd.DataFrame,
    all_points_gain_loss: tuple[float, float],
) -> dict:
    """Run-level totals. Both raw D+/D- figures are kept side by side."""
    total_km = total_distance_m / 1000.0
    stop_sec = checkpoint_stop_sec + rest_stop_sec
    moving_target = target_total_sec - stop_sec
    computed_moving = int(detailed["timeSec"].sum()) if not detailed.empty else 0

    stage_gain = int(stages["gainM"].sum()) if not stages.empty else 0
    stage_loss = int(stages["lossM"].sum()) if not stages.empty else 0
    segment_gain = float(detailed["gainM"].sum()) if not detailed.empty else 0.0
    segment_loss = float(detailed["lossM"].sum()) if not detailed.empty else 0.0

    effort_km = total_km + stage_gain / EFFORT_GAIN_M_PER_KM

    return {
        "totalDistanceM": total_distance_m,
        "totalDistanceKm": total_km,
        "targetTotalSec": target_total_sec,
        "checkpointStopSec": checkpoint_stop_sec,
        "restStopSec": rest_stop_sec,
        "stopTimeSec": stop_sec,
        "movingTargetSec": moving_target,
        "computedMovingSec": computed_moving,
        "computedTotalSec": computed_moving + stop_sec,
        "allPointsGainM": int(round(all_points_gain_loss[0])),
        "allPointsLossM": int(round(all_points_gain_loss[1])),
        "stageGainM": stage_gain,
        "stageLossM": stage_loss,
        "segmentGainM": int(round(segment_gain)),
        "segmentLossM": int(round(segment_loss)),
        "avgPace": pace_from_totals(target_total_sec, total_km),
        "effortDistanceKm": effort_km,
        "avgEffortPace": pace_from_totals(target_total_sec, effort_km),
    }


def calibration_summary(flat_speed_kmh: float, iterations: int, bounds: tuple[float, float]) -> dict:
    return {
        "flatSpeedKmh": flat_speed_kmh,
        "flatPace": format_pace_min_km(flat_speed_kmh),
        "iterations": int(iterations),
        "speedBoundsKmh": [float(bounds[0]), float(bounds[1])],
        "bracketWidthKmh": (float(bounds[1]) - float(bounds[0])) / math.pow(2, int(iterations)),
    }
