"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Time helpers for race durations.
"""

from __future__ import annotations

import math

from services.pacing.errors import FormatError


def parse_time_to_seconds(value: str) -> int:
    """Parse "HH:MM" or "HH:MM:SS" into whole seconds.

    Raises:
        FormatError: any other token count, or non-numeric/negative tokens
    """
    if not isinstance(value, str):
        raise FormatError(f"Invalid time format: {value!r} (expected HH:MM or HH:MM:SS)")
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise FormatError(f"Invalid time format: {value!r} (expected HH:MM or HH:MM:SS)")

    numbers = []
    for part in parts:
        token = part.strip()
        if not (token.isascii() and token.isdigit()):
            raise FormatError(f"Invalid time format: {value!r} (expected HH:MM or HH:MM:SS)")
        numbers.append(int(token))

    if len(numbers) == 2:
        hours, minutes = numbers
        seconds = 0
    else:
        hours, minutes, seconds = numbers
    return hours * 3600 + minutes * 60 + seconds


def format_hms(seconds: float) -> str:
    """Format a duration as zero-padded HH:MM:SS (rounded to the second)."""
    if not math.isfinite(float(seconds)):
        return "--:--:--"
    total = int(round(float(seconds)))
    sign = "-" if total < 0 else ""
    total = abs(total)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    return f"{sign}{h:02d}:{m:02d}:{s:02d}"


def minutes_to_seconds(minutes: float) -> int:
    # Stops are accounted in whole seconds
    if not math.isfinite(minutes):
        return 0
    return int(round(minutes * 60))
