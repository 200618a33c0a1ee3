"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Pacing service: terrain-aware pacing plan for a GPS track.

Pipeline: condition the track (fill then smooth elevation, accumulate
distance), resample at a fixed step, build slope segments, calibrate the flat
speed against the target moving time, then detail and aggregate per km and
per stage. Named input configurations are stored through PacingConfigsRepo.
"""

from __future__ import annotations

import datetime as dt
import json
import math
from typing import Any, Optional

import pandas as pd
from streamlit.logger import get_logger

from config import MIN_CALIBRATION_ITERATIONS, PROFILES
from persistence.csv_storage import CsvStorage
from persistence.repositories import PacingConfigsRepo
from services.pacing import aggregation
from services.pacing.calibration import calibrate_flat_speed
from services.pacing.errors import PacingError, ValidationError
from services.pacing.models import Checkpoint, PacingRequest, PacingResult, RestPeriods
from services.pacing.preprocessing import PacingPreprocessor, points_to_frame
from services.pacing.resampling import build_segments, resample_points
from utils.gpx_parser import parse_gpx_points
from utils.time import format_hms, minutes_to_seconds, parse_time_to_seconds

logger = get_logger(__name__)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def validate_request(request: PacingRequest) -> int:
    """Check track-independent inputs; returns the target total in seconds.

    Raises:
        FormatError: malformed target time
        ValidationError: any out-of-range parameter
    """
    if request.profile not in PROFILES:
        raise ValidationError(
            f"Unknown profile {request.profile!r} (expected one of: {', '.join(PROFILES)})"
        )
    if not _is_number(request.caution) or not 0.0 <= float(request.caution) <= 1.0:
        raise ValidationError(f"Caution must be within [0, 1], got {request.caution!r}")

    window = request.smoothing_window
    if isinstance(window, bool) or not _is_number(window) or int(window) != window:
        raise ValidationError(f"Smoothing window must be an odd integer >= 1, got {window!r}")
    if int(window) < 1 or int(window) % 2 == 0:
        raise ValidationError(f"Smoothing window must be an odd integer >= 1, got {window!r}")

    if not _is_number(request.resample_step_m) or float(request.resample_step_m) <= 0:
        raise ValidationError(f"Resample step must be > 0 m, got {request.resample_step_m!r}")

    bounds = request.flat_speed_bounds_kmh
    if (
        len(bounds) != 2
        or not all(_is_number(b) for b in bounds)
        or not 0 < float(bounds[0]) < float(bounds[1])
    ):
        raise ValidationError(f"Flat speed bounds must satisfy 0 < vmin < vmax, got {bounds!r}")

    if (
        isinstance(request.iterations, bool)
        or not _is_number(request.iterations)
        or int(request.iterations) < MIN_CALIBRATION_ITERATIONS
    ):
        raise ValidationError(
            f"Calibration iterations must be >= {MIN_CALIBRATION_ITERATIONS}, got {request.iterations!r}"
        )

    for cp in request.checkpoints:
        if not _is_number(cp.position_km) or float(cp.position_km) <= 0:
            raise ValidationError(f"Checkpoint position must be > 0 km, got {cp.position_km!r}")
        if not _is_number(cp.stop_minutes) or float(cp.stop_minutes) < 0:
            raise ValidationError(
                f"Checkpoint stop at km {cp.position_km} must be >= 0 min, got {cp.stop_minutes!r}"
            )

    rest = request.rest
    if not _is_number(rest.count) or float(rest.count) < 0:
        raise ValidationError(f"Rest count must be >= 0, got {rest.count!r}")
    if not _is_number(rest.minutes_each) or float(rest.minutes_each) < 0:
        raise ValidationError(f"Rest minutes must be >= 0, got {rest.minutes_each!r}")

    target_total_sec = parse_time_to_seconds(request.target_time)
    if target_total_sec <= 0:
        raise ValidationError(f"Target time must be positive, got {request.target_time!r}")
    return target_total_sec


def stop_seconds(request: PacingRequest) -> tuple[int, int]:
    """(checkpoint stop seconds, rest stop seconds)."""
    checkpoint_sec = sum(minutes_to_seconds(float(cp.stop_minutes)) for cp in request.checkpoints)
    rest_sec = minutes_to_seconds(float(request.rest.count) * float(request.rest.minutes_each))
    return checkpoint_sec, rest_sec


def compute_pacing(points: Any, request: PacingRequest) -> PacingResult:
    """Compute a full pacing plan for a track.

    Args:
        points: DataFrame (lat, lon, elevationM) or sequence of points
        request: Pacing inputs

    Returns:
        PacingResult with totals, calibration, stages, per-km, segments

    Raises:
        PacingError: ParseError, FormatError, ValidationError or
            InfeasibleTargetError; no partial result is produced
    """
    target_total_sec = validate_request(request)
    checkpoint_stop_sec, rest_stop_sec = stop_seconds(request)
    total_stop_sec = checkpoint_stop_sec + rest_stop_sec
    moving_target_sec = target_total_sec - total_stop_sec
    if moving_target_sec <= 0:
        raise ValidationError(
            f"Total stop time exceeds target time ({format_hms(total_stop_sec)} >= "
            f"{format_hms(target_total_sec)})"
        )

    track = PacingPreprocessor().condition_track(points_to_frame(points), int(request.smoothing_window))
    total_m = float(track["cumulativeDistanceM"].iloc[-1])
    total_km = total_m / 1000.0

    for cp in request.checkpoints:
        if float(cp.position_km) >= total_km:
            raise ValidationError(
                f"Checkpoint at km {cp.position_km} is beyond the track end ({total_km:.3f} km)"
            )

    samples = resample_points(
        track, track["cumulativeDistanceM"].to_numpy(), float(request.resample_step_m), "elevationSmoothM"
    )
    segments = build_segments(samples)
    logger.info("Pacing on %.3f km: %d points, %d segments", total_km, len(track), len(segments))

    bounds = (float(request.flat_speed_bounds_kmh[0]), float(request.flat_speed_bounds_kmh[1]))
    flat_speed = calibrate_flat_speed(
        segments,
        moving_target_sec,
        request.profile,
        float(request.caution),
        speed_bounds=bounds,
        iterations=int(request.iterations),
    )
    logger.info("Calibrated flat speed: %.3f km/h", flat_speed)

    detailed = aggregation.detail_segments(segments, flat_speed, request.profile, float(request.caution))
    per_km = aggregation.group_per_km(detailed)
    boundaries = aggregation.stage_boundaries([cp.position_km for cp in request.checkpoints], total_km)
    stages = aggregation.build_stages(detailed, track, boundaries, request.checkpoints)

    totals = aggregation.compute_totals(
        total_distance_m=total_m,
        target_total_sec=target_total_sec,
        checkpoint_stop_sec=checkpoint_stop_sec,
        rest_stop_sec=rest_stop_sec,
        detailed=detailed,
        stages=stages,
        all_points_gain_loss=aggregation.raw_gain_loss(track["elevationFilledM"].to_numpy()),
    )
    calibration = aggregation.calibration_summary(flat_speed, int(request.iterations), bounds)

    return PacingResult(
        request=request,
        totals=totals,
        calibration=calibration,
        stages=stages,
        per_km=per_km,
        segments=detailed,
        samples=samples,
    )


def request_from_record(record: dict[str, Any]) -> PacingRequest:
    """Rebuild a PacingRequest from a stored configuration row."""
    checkpoints_raw = record.get("checkpointsJson") or "[]"
    try:
        checkpoints_data = json.loads(checkpoints_raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Corrupted checkpoints in saved configuration: {e}") from e

    checkpoints = tuple(
        Checkpoint(position_km=float(cp["km"]), stop_minutes=float(cp.get("stopMinutes", 0)))
        for cp in checkpoints_data
    )
    kwargs: dict[str, Any] = {
        "target_time": str(record.get("targetTime", "")),
        "profile": str(record.get("profile", "")),
        "caution": float(record.get("caution") or 0.0),
        "checkpoints": checkpoints,
        "rest": RestPeriods(
            count=int(float(record.get("restCount") or 0)),
            minutes_each=float(record.get("restMinutesEach") or 0.0),
        ),
    }
    if record.get("resampleStepM"):
        kwargs["resample_step_m"] = float(record["resampleStepM"])
    if record.get("smoothingWindow"):
        kwargs["smoothing_window"] = int(float(record["smoothingWindow"]))
    return PacingRequest(**kwargs)


class PacingService:
    """Service for terrain-aware race pacing and saved configurations."""

    def __init__(self, storage: CsvStorage):
        self.storage = storage
        self.configs = PacingConfigsRepo(storage)

    def compute_pacing(self, points: Any, request: PacingRequest) -> PacingResult:
        try:
            return compute_pacing(points, request)
        except PacingError as e:
            logger.warning("Pacing rejected: %s", e)
            raise

    def compute_pacing_from_gpx(self, gpx_bytes: bytes, request: PacingRequest) -> PacingResult:
        try:
            points = parse_gpx_points(gpx_bytes)
        except PacingError as e:
            logger.warning("GPX rejected: %s", e)
            raise
        return self.compute_pacing(points, request)

    def save_configuration(self, name: str, request: PacingRequest) -> str:
        """Save the request inputs under a name; an existing name is updated."""
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Configuration name must not be empty")

        now = dt.datetime.now().isoformat(timespec="seconds")
        row = {
            "name": clean_name,
            "updatedAt": now,
            "targetTime": request.target_time,
            "profile": request.profile,
            "caution": request.caution,
            "checkpointsJson": json.dumps(
                [{"km": cp.position_km, "stopMinutes": cp.stop_minutes} for cp in request.checkpoints]
            ),
            "restCount": request.rest.count,
            "restMinutesEach": request.rest.minutes_each,
            "resampleStepM": request.resample_step_m,
            "smoothingWindow": request.smoothing_window,
        }

        existing = self.configs.find_by_name(clean_name)
        if existing is not None:
            config_id = str(existing["configId"])
            self.configs.update(config_id, row)
            logger.info("Updated pacing configuration %s: %s", config_id, clean_name)
            return config_id

        row["createdAt"] = now
        config_id = self.configs.create(row)
        logger.info("Saved pacing configuration %s: %s", config_id, clean_name)
        return config_id

    def load_configuration(self, name_or_id: str) -> Optional[PacingRequest]:
        key = (name_or_id or "").strip()
        record = self.configs.find_by_name(key) or self.configs.get(key)
        if record is None:
            return None
        return request_from_record(record)

    def list_configurations(self) -> pd.DataFrame:
        df = self.configs.list()
        if df.empty:
            return pd.DataFrame(columns=["configId", "name", "createdAt", "targetTime"])
        df = df.sort_values("createdAt", ascending=False).reset_index(drop=True)
        return df[["configId", "name", "createdAt", "targetTime"]].copy()

    def delete_configuration(self, name_or_id: str) -> bool:
        key = (name_or_id or "").strip()
        record = self.configs.find_by_name(key) or self.configs.get(key)
        if record is None:
            return False
        deleted = self.configs.delete(str(record["configId"]))
        if deleted:
            logger.info("Deleted pacing configuration %s", record["configId"])
        return deleted
