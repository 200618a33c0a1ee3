"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Coercion of user-entered values (CLI arguments, text areas) into pacing inputs.
"""

from __future__ import annotations

import math
from typing import Any, List

from services.pacing.errors import FormatError
from services.pacing.models import Checkpoint, RestPeriods


def parse_number_pair(text: Any, label: str) -> tuple[float, float]:
    """Parse "a,b" into two finite floats.

    Raises:
        FormatError: not exactly two comma-separated numbers
    """
    parts = [p.strip() for p in str(text).split(",")]
    if len(parts) != 2 or not all(parts):
        raise FormatError(f"Invalid {label}: {text!r} (expected two values separated by a comma)")
    try:
        a, b = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise FormatError(f"Invalid {label}: {text!r} (values must be numbers)") from e
    if not (math.isfinite(a) and math.isfinite(b)):
        raise FormatError(f"Invalid {label}: {text!r} (values must be finite)")
    return a, b


def parse_checkpoint(text: Any) -> Checkpoint:
    km, minutes = parse_number_pair(text, "checkpoint")
    return Checkpoint(position_km=km, stop_minutes=minutes)


def parse_checkpoint_lines(text: str) -> List[Checkpoint]:
    """One "km,minutes" checkpoint per non-empty line; a bare "km" means no stop."""
    checkpoints = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        if "," not in line:
            try:
                checkpoints.append(Checkpoint(position_km=float(line), stop_minutes=0.0))
            except ValueError as e:
                raise FormatError(f"Invalid checkpoint: {line!r}") from e
            continue
        checkpoints.append(parse_checkpoint(line))
    return checkpoints


def parse_rest(text: Any) -> RestPeriods:
    count, minutes = parse_number_pair(text, "rest periods")
    if count != int(count):
        raise FormatError(f"Invalid rest periods: {text!r} (count must be a whole number)")
    return RestPeriods(count=int(count), minutes_each=minutes)


def format_checkpoint_lines(checkpoints: List[Checkpoint]) -> str:
    return "\n".join(f"{cp.position_km:g},{cp.stop_minutes:g}" for cp in checkpoints)
