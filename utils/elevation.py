"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Elevation-related helpers.

Conditioning order is fill then smooth: `smooth_elevation` expects the output
of `fill_missing_elevation`.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from services.pacing.errors import ValidationError


def fill_missing_elevation(values: Sequence[float]) -> np.ndarray:
    """Fill non-finite elevation samples.

    Forward-fills from the nearest preceding finite value, then back-fills the
    leading gap from the nearest following one. When no finite value exists
    anywhere, every entry resolves to 0.

    Args:
        values: Raw elevation samples (NaN/inf/None for missing)

    Returns:
        Finite array with the same length as the input
    """
    out = np.array(values, dtype=float)

    last = None
    for i in range(len(out)):
        if np.isfinite(out[i]):
            last = out[i]
        elif last is not None:
            out[i] = last

    following = None
    for i in range(len(out) - 1, -1, -1):
        if np.isfinite(out[i]):
            following = out[i]
        elif following is not None:
            out[i] = following

    out[~np.isfinite(out)] = 0.0
    return out


def smooth_elevation(values: Sequence[float], window_size: int) -> np.ndarray:
    """Centered moving average over the finite neighbours of each sample.

    The window is clipped to the array bounds. An index whose window holds no
    finite value yields NaN.

    Args:
        values: Elevation samples, already filled
        window_size: Odd window length; 1 returns a copy

    Returns:
        Smoothed array with the same length as the input
    """
    if isinstance(window_size, bool) or int(window_size) != window_size:
        raise ValidationError(f"Smoothing window must be an integer, got {window_size!r}")
    window_size = int(window_size)
    if window_size < 1 or window_size % 2 == 0:
        raise ValidationError(
            f"Smoothing window must be an odd integer >= 1, got {window_size}"
        )

    x = np.array(values, dtype=float)
    if window_size == 1:
        return x.copy()

    half = window_size // 2
    finite = np.isfinite(x)
    zeroed = np.where(finite, x, 0.0)

    # Prefix sums give every clipped window sum in one pass
    sums = np.concatenate(([0.0], np.cumsum(zeroed)))
    counts = np.concatenate(([0], np.cumsum(finite.astype(int))))

    idx = np.arange(len(x))
    lo = np.clip(idx - half, 0, len(x))
    hi = np.clip(idx + half + 1, 0, len(x))

    window_sum = sums[hi] - sums[lo]
    window_count = counts[hi] - counts[lo]

    out = np.full(len(x), np.nan)
    valid = window_count > 0
    out[valid] = window_sum[valid] / window_count[valid]
    return out


def elevation_gain_loss(values: Sequence[float]) -> tuple[float, float]:
    """Cumulative elevation gain and loss (both positive, meters).

    Positive deltas add to gain, negative deltas add their absolute value to
    loss, flat deltas to neither.
    """
    x = np.asarray(values, dtype=float)
    if len(x) < 2:
        return 0.0, 0.0
    deltas = np.diff(x)
    gain = float(deltas[deltas > 0].sum())
    loss = float(-deltas[deltas < 0].sum())
    return gain, loss
