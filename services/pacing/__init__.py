"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from services.pacing_service import PacingService as PacingService
    from services.pacing_service import compute_pacing as compute_pacing


def __getattr__(name: str) -> object:
    if name == "PacingService":
        from services.pacing_service import PacingService

        return PacingService
    if name == "compute_pacing":
        from services.pacing_service import compute_pacing

        return compute_pacing
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["PacingService", "compute_pacing"]
