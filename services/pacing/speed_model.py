"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Slope to speed model.

The table is piecewise and discontinuous at bracket edges. Steep climbs and
steep descents ignore the flat speed and pick a value inside a fixed range
(km/h) according to the caution factor.
"""

from __future__ import annotations

import math

# (min_kmh, max_kmh) per profile for steep climbs
UPHILL_RANGES_KMH = {
    "trained": {
        "12-15": (5.45, 6.00),
        "15-20": (4.80, 5.45),
        "20+": (4.00, 4.62),
    },
    "standard": {
        "12-15": (4.62, 5.45),
        "15-20": (4.00, 4.62),
        "20+": (3.33, 4.00),
    },
}

# Steep descents do not depend on the profile
DOWNHILL_RANGES_KMH = {
    "6-8": (5.45, 6.67),
    "8-12": (4.62, 6.00),
    "12+": (4.00, 5.45),
}


def pick_speed_from_range(min_kmh: float, max_kmh: float, caution: float) -> float:
    """Caution 0 gives the faster bound, caution 1 the slower one."""
    return max_kmh - caution * (max_kmh - min_kmh)


def speed_for_slope(slope_pct: float, flat_speed_kmh: float, profile: str, caution: float) -> float:
    """Modeled speed (km/h) on a segment of the given slope.

    Args:
        slope_pct: Segment slope in percent (positive uphill)
        flat_speed_kmh: Calibrated speed on flat terrain
        profile: "trained" or "standard"
        caution: 0 (optimistic) to 1 (conservative)

    Returns:
        Speed in km/h
    """
    s = float(slope_pct)
    v = float(flat_speed_kmh)
    if math.isnan(s):
        return v

    ranges = UPHILL_RANGES_KMH.get(profile, UPHILL_RANGES_KMH["standard"])

    if -1.0 <= s <= 1.0:
        return v

    if s > 1.0:
        if s <= 12.0:
            return v / (1.0 + 0.04 * s)
        if s <= 15.0:
            return pick_speed_from_range(*ranges["12-15"], caution)
        if s <= 20.0:
            return pick_speed_from_range(*ranges["15-20"], caution)
        return pick_speed_from_range(*ranges["20+"], caution)

    a = abs(s)
    if s >= -3.0:
        return v / (1.0 - 0.02 * a)
    if s >= -4.0:
        return v / ((1.0 - 0.02 * a) * 1.05)
    if s >= -6.0:
        return v / ((1.0 - 0.02 * a) * 1.10)
    if s >= -8.0:
        return pick_speed_from_range(*DOWNHILL_RANGES_KMH["6-8"], caution)
    if s >= -12.0:
        return pick_speed_from_range(*DOWNHILL_RANGES_KMH["8-12"], caution)
    return pick_speed_from_range(*DOWNHILL_RANGES_KMH["12+"], caution)
