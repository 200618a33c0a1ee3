"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np
import pandas as pd
from streamlit.logger import get_logger

from services.pacing.errors import ParseError
from utils.elevation import fill_missing_elevation, smooth_elevation
from utils.geo import add_cumulative_distance

logger = get_logger(__name__)


def points_to_frame(points: Any) -> pd.DataFrame:
    """Normalize track points into a DataFrame with lat, lon, elevationM.

    Accepts a DataFrame (elevationM, ele or elevation column) or an iterable
    of mappings / (lat, lon, ele) tuples. Missing elevation becomes NaN.
    """
    if isinstance(points, pd.DataFrame):
        df = points.copy()
        if "elevationM" not in df.columns:
            for alt in ("ele", "elevation"):
                if alt in df.columns:
                    df = df.rename(columns={alt: "elevationM"})
                    break
            else:
                df["elevationM"] = np.nan
        missing = [c for c in ("lat", "lon") if c not in df.columns]
        if missing:
            raise ParseError(f"Track points are missing columns: {', '.join(missing)}")
        return df[["lat", "lon", "elevationM"]].reset_index(drop=True)

    rows = []
    for p in points or []:
        if isinstance(p, Mapping):
            ele = p.get("elevationM", p.get("ele", p.get("elevation")))
            rows.append({"lat": p.get("lat"), "lon": p.get("lon"), "elevationM": ele})
        else:
            values = list(p)
            rows.append(
                {
                    "lat": values[0] if len(values) > 0 else None,
                    "lon": values[1] if len(values) > 1 else None,
                    "elevationM": values[2] if len(values) > 2 else None,
                }
            )
    return pd.DataFrame(rows, columns=["lat", "lon", "elevationM"])


class PacingPreprocessor:
    """Condition a raw track for the pacing engine (distance-referenced)."""

    def condition_track(self, points: pd.DataFrame, smoothing_window: int) -> pd.DataFrame:
        """Fill then smooth elevation and accumulate along-track distance.

        Lat/lon are never modified. Rows without usable coordinates are
        dropped first.

        Args:
            points: DataFrame with lat, lon, elevationM (NaN for missing)
            smoothing_window: Odd window for the elevation moving average

        Returns:
            DataFrame with elevationFilledM, elevationSmoothM,
            stepDistanceM and cumulativeDistanceM added

        Raises:
            ParseError: fewer than 2 usable points or a zero-length track
        """
        df = points.copy()
        df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
        df["lon"] = pd.to_numeric(df["lon"], errors="coerce")
        df["elevationM"] = pd.to_numeric(df["elevationM"], errors="coerce")

        usable = np.isfinite(df["lat"].to_numpy(dtype=float)) & np.isfinite(
            df["lon"].to_numpy(dtype=float)
        )
        dropped = int((~usable).sum())
        if dropped:
            logger.warning("Dropping %d track points without coordinates", dropped)
        df = df.loc[usable].reset_index(drop=True)

        if len(df) < 2:
            raise ParseError(f"At least 2 track points are required, got {len(df)}")

        df["elevationFilledM"] = fill_missing_elevation(df["elevationM"].to_numpy())
        df["elevationSmoothM"] = smooth_elevation(df["elevationFilledM"].to_numpy(), smoothing_window)

        df = add_cumulative_distance(df, lat_col="lat", lon_col="lon")
        total_m = float(df["cumulativeDistanceM"].iloc[-1])
        if not np.isfinite(total_m) or total_m <= 0:
            raise ParseError("Track has zero length")

        logger.debug("Conditioned %d points, total %.1f m", len(df), total_m)
        return df
