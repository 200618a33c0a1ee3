"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Input and result structures for the pacing engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from config import (
    CALIBRATION_ITERATIONS,
    DEFAULT_CAUTION,
    DEFAULT_PROFILE,
    DEFAULT_RESAMPLE_STEP_M,
    DEFAULT_SMOOTHING_WINDOW,
    FLAT_SPEED_BOUNDS_KMH,
)


@dataclass(frozen=True)
class Checkpoint:
    """Aid station at a fixed distance with a timed stop."""

    position_km: float
    stop_minutes: float = 0.0


@dataclass(frozen=True)
class RestPeriods:
    """Aggregate rest time added once to the total (e.g. sleep breaks)."""

    count: int = 0
    minutes_each: float = 0.0

    @property
    def total_minutes(self) -> float:
        return self.count * self.minutes_each


@dataclass(frozen=True)
class PacingRequest:
    """Everything a single pacing computation needs besides the track."""

    target_time: str
    profile: str = DEFAULT_PROFILE
    caution: float = DEFAULT_CAUTION
    checkpoints: tuple[Checkpoint, ...] = ()
    rest: RestPeriods = field(default_factory=RestPeriods)
    resample_step_m: float = DEFAULT_RESAMPLE_STEP_M
    smoothing_window: int = DEFAULT_SMOOTHING_WINDOW
    flat_speed_bounds_kmh: tuple[float, float] = FLAT_SPEED_BOUNDS_KMH
    iterations: int = CALIBRATION_ITERATIONS

    def __post_init__(self) -> None:
        # Accept lists from callers while keeping the request hashable
        object.__setattr__(self, "checkpoints", tuple(self.checkpoints))
        object.__setattr__(self, "flat_speed_bounds_kmh", tuple(self.flat_speed_bounds_kmh))

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetTime": self.target_time,
            "profile": self.profile,
            "caution": self.caution,
            "checkpoints": [
                {"km": cp.position_km, "stopMinutes": cp.stop_minutes} for cp in self.checkpoints
            ],
            "rest": {"count": self.rest.count, "minutesEach": self.rest.minutes_each},
            "resampleStepM": self.resample_step_m,
            "smoothingWindow": self.smoothing_window,
            "flatSpeedBoundsKmh": list(self.flat_speed_bounds_kmh),
            "iterations": self.iterations,
        }


@dataclass(frozen=True)
class PacingResult:
    """Full output of one pacing computation.

    Frames use camelCase columns:
        stages: index, fromKm, toKm, distanceKm, gainM, lossM, movingSec,
            stopSec, totalSec, avgSpeedKmh, avgPace
        per_km: km, segmentsCount, distanceKm, timeSec, avgSpeedKmh, avgPace,
            avgSlopePct, gainM, lossM
        segments: index, fromM, toM, lengthM, deltaElevM, slopePct, gainM,
            lossM, speedKmh, pace, timeSecExact, timeSec, slopeClass
        samples: index, distanceM, lat, lon, elevationM
    """

    request: PacingRequest
    totals: dict[str, Any]
    calibration: dict[str, Any]
    stages: pd.DataFrame
    per_km: pd.DataFrame
    segments: pd.DataFrame
    samples: pd.DataFrame
