"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

FR locale display helpers for decimals, units and paces.

Note: CSV storage must keep '.' as decimal separator. These helpers
are for UI rendering only.
"""

from __future__ import annotations

import math
from typing import Optional

from babel import numbers
from babel.core import UnknownLocaleError

LOCALE = "fr_FR"


def set_locale(locale_str: str = "fr_FR") -> None:
    global LOCALE
    try:
        # Validate by formatting a simple number
        numbers.format_decimal(1.0, locale=locale_str)
        LOCALE = locale_str
    except (UnknownLocaleError, ValueError, TypeError):
        LOCALE = "fr_FR"


def _nbsp() -> str:
    return "\u00A0"


def fmt_decimal(value: Optional[float], digits: Optional[int] = None) -> str:
    if value is None:
        return ""
    fmt = None
    if digits is not None:
        fmt = "#" if digits == 0 else "#." + ("0" * digits)
    formatted = numbers.format_decimal(value, format=fmt, locale=LOCALE)
    if digits is None and "," in formatted:
        head, sep, tail = formatted.partition(",")
        trimmed = tail.rstrip("0")
        if trimmed == "":
            formatted = head
        elif trimmed != tail:
            formatted = head + sep + trimmed
    return formatted


def fmt_km(km: Optional[float], digits: int = 1) -> str:
    if km is None:
        return ""
    return f"{fmt_decimal(km, digits)}{_nbsp()}km"


def fmt_m(meters: Optional[float]) -> str:
    if meters is None:
        return ""
    # integers preferred
    return f"{numbers.format_decimal(int(round(meters)), locale=LOCALE)}{_nbsp()}m"


def fmt_speed_kmh(speed_kmh: Optional[float]) -> str:
    if speed_kmh is None:
        return ""
    return f"{fmt_decimal(speed_kmh, 1)}{_nbsp()}km/h"


def fmt_pct(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{fmt_decimal(value, 1)}{_nbsp()}%"


def format_pace_from_minutes(min_per_km: Optional[float]) -> Optional[str]:
    """Format a pace given in minutes per km as MM:SS.

    Seconds are rounded; a rounded value of 60 rolls over into the next minute.
    Returns None for missing, non-finite or non-positive paces.
    """
    if min_per_km is None:
        return None
    try:
        value = float(min_per_km)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    minutes = int(math.floor(value))
    seconds = int(round((value - minutes) * 60))
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes:02d}:{seconds:02d}"


def format_pace_min_km(speed_kmh: Optional[float]) -> Optional[str]:
    """Pace (MM:SS per km) for a speed in km/h, or None when not positive."""
    if speed_kmh is None:
        return None
    try:
        value = float(speed_kmh)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return format_pace_from_minutes(60.0 / value)


def pace_from_totals(total_sec: float, distance_km: float) -> Optional[str]:
    """Average pace as total time over total distance."""
    if distance_km is None or distance_km <= 0:
        return None
    return format_pace_from_minutes(total_sec / 60.0 / distance_km)
