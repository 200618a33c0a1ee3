"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

import pandas as pd

SLOPE_CLASSES = [
    "down_max",
    "down_extreme",
    "down_very_strong",
    "down_strong",
    "down_moderate",
    "down_light",
    "flat",
    "up_light",
    "up_moderate",
    "up_strong",
    "up_very_strong",
]


def classify_slope(slope_pct: float) -> str:
    """Classify a slope (percent) using the speed model brackets.

    Args:
        slope_pct: Slope in percent (positive uphill).

    Returns:
        One of SLOPE_CLASSES; non-finite slopes are flat.
    """
    if pd.isna(slope_pct) or slope_pct in (float("inf"), float("-inf")):
        return "flat"

    if -1 <= slope_pct <= 1:
        return "flat"
    if 1 < slope_pct <= 12:
        return "up_light"
    if 12 < slope_pct <= 15:
        return "up_moderate"
    if 15 < slope_pct <= 20:
        return "up_strong"
    if slope_pct > 20:
        return "up_very_strong"
    if -3 <= slope_pct < -1:
        return "down_light"
    if -4 <= slope_pct < -3:
        return "down_moderate"
    if -6 <= slope_pct < -4:
        return "down_strong"
    if -8 <= slope_pct < -6:
        return "down_very_strong"
    if -12 <= slope_pct < -8:
        return "down_extreme"
    return "down_max"
