"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Great-circle distance helpers.
"""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt

import numpy as np
import pandas as pd

from config import EARTH_RADIUS_M


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two lat/lon points (degrees) in meters.

    NaN coordinates propagate to a NaN distance.
    """
    phi1, phi2 = radians(lat1), radians(lat2)
    dphi = radians(lat2 - lat1)
    dlambda = radians(lon2 - lon1)

    a = sin(dphi / 2.0) ** 2 + cos(phi1) * cos(phi2) * sin(dlambda / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_M * atan2(sqrt(a), sqrt(1.0 - a))


def step_distances_m(lat: np.ndarray, lon: np.ndarray) -> np.ndarray:
    """Distance from the previous point for each point (first is 0)."""
    lat = np.asarray(lat, dtype=float)
    lon = np.asarray(lon, dtype=float)
    steps = np.zeros(len(lat), dtype=float)
    if len(lat) < 2:
        return steps

    phi1 = np.radians(lat[:-1])
    phi2 = np.radians(lat[1:])
    dphi = np.radians(lat[1:] - lat[:-1])
    dlambda = np.radians(lon[1:] - lon[:-1])

    a = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2.0) ** 2
    steps[1:] = 2.0 * EARTH_RADIUS_M * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return steps


def cumulative_distances_m(lat: np.ndarray, lon: np.ndarray) -> np.ndarray:
    """Cumulative along-track distance in meters, starting at 0."""
    return np.cumsum(step_distances_m(lat, lon))


def add_cumulative_distance(df: pd.DataFrame, lat_col: str = "lat", lon_col: str = "lon") -> pd.DataFrame:
    """Add stepDistanceM and cumulativeDistanceM columns."""
    df = df.copy()
    df["stepDistanceM"] = step_distances_m(df[lat_col].to_numpy(), df[lon_col].to_numpy())
    df["cumulativeDistanceM"] = df["stepDistanceM"].cumsum()
    return df
