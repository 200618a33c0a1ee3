"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Errors raised by the pacing engine. Each one is terminal for a single call.
"""

from __future__ import annotations


class PacingError(ValueError):
    """Base class for pacing failures."""


class ParseError(PacingError):
    """Track input is malformed or has fewer than 2 usable points."""


class FormatError(PacingError):
    """A time string or CLI pair is malformed."""


class ValidationError(PacingError):
    """An input parameter is out of range."""


class InfeasibleTargetError(PacingError):
    """The flat speed bounds cannot bracket the target moving time."""
