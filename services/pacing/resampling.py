"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Fixed-step resampling of a track and derivation of the segment table.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from streamlit.logger import get_logger

from services.pacing.errors import ParseError, ValidationError

logger = get_logger(__name__)

RESAMPLED_COLUMNS = ["index", "distanceM", "lat", "lon", "elevationM"]
SEGMENT_COLUMNS = ["index", "fromM", "toM", "lengthM", "deltaElevM", "slopePct"]


def _target_distances(total_m: float, step_m: float) -> list[float]:
    targets = []
    i = 0
    d = 0.0
    while d < total_m:
        targets.append(d)
        i += 1
        d = i * step_m
    targets.append(total_m)
    return targets


def resample_points(
    points: pd.DataFrame,
    cumulative_m: np.ndarray,
    step_m: float,
    elevation_col: str = "elevationM",
) -> pd.DataFrame:
    """Rebuild a track at fixed along-track distances.

    Targets are 0, step, 2*step, ... strictly below the total, then the total
    itself, so the last interval may be shorter than the step. The bracketing
    original pair is found with a forward-only pointer (single linear pass).
    Latitude, longitude and elevation are linearly interpolated; a bracket of
    zero length uses fraction 0.

    Args:
        points: DataFrame with lat, lon and the elevation column
        cumulative_m: Cumulative distance aligned with points, starting at 0
        step_m: Resample step in meters (> 0)
        elevation_col: Column holding the elevation to interpolate

    Returns:
        DataFrame with index, distanceM, lat, lon, elevationM
    """
    if len(points) < 2:
        raise ParseError("At least 2 track points are required")
    if not np.isfinite(step_m) or step_m <= 0:
        raise ValidationError(f"Resample step must be > 0 m, got {step_m}")

    cum = np.asarray(cumulative_m, dtype=float)
    if len(cum) != len(points):
        raise ValidationError("Cumulative distances must align with track points")

    lat = points["lat"].to_numpy(dtype=float)
    lon = points["lon"].to_numpy(dtype=float)
    ele = points[elevation_col].to_numpy(dtype=float)
    n = len(cum)
    total = float(cum[-1])

    rows = []
    j = 1
    for k, target in enumerate(_target_distances(total, step_m)):
        while j < n and cum[j] < target:
            j += 1
        if j >= n:
            j = n - 1
        i0 = j - 1
        d0, d1 = cum[i0], cum[j]
        t = 0.0 if d1 == d0 else (target - d0) / (d1 - d0)
        rows.append(
            {
                "index": k,
                "distanceM": target,
                "lat": lat[i0] + (lat[j] - lat[i0]) * t,
                "lon": lon[i0] + (lon[j] - lon[i0]) * t,
                "elevationM": ele[i0] + (ele[j] - ele[i0]) * t,
            }
        )

    resampled = pd.DataFrame(rows, columns=RESAMPLED_COLUMNS)
    logger.debug("Resampled %d points into %d samples (step=%.1f m)", n, len(resampled), step_m)
    return resampled


def build_segments(resampled: pd.DataFrame) -> pd.DataFrame:
    """Segments between consecutive resampled samples.

    slopePct is deltaElevM / lengthM * 100, and 0 for a zero-length segment.
    """
    if len(resampled) < 2:
        return pd.DataFrame(columns=SEGMENT_COLUMNS)

    dist = resampled["distanceM"].to_numpy(dtype=float)
    ele = resampled["elevationM"].to_numpy(dtype=float)

    from_m = dist[:-1]
    to_m = dist[1:]
    length = to_m - from_m
    delta = ele[1:] - ele[:-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        slope = np.where(length > 0, delta / np.where(length > 0, length, 1.0) * 100.0, 0.0)

    return pd.DataFrame(
        {
            "index": np.arange(len(length)),
            "fromM": from_m,
            "toM": to_m,
            "lengthM": length,
            "deltaElevM": delta,
            "slopePct": slope,
        },
        columns=SEGMENT_COLUMNS,
    )
