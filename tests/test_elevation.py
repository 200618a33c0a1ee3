"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Tests for elevation conditioning.
"""

from __future__ import annotations

import numpy as np
import pytest

from services.pacing.errors import ValidationError
from utils.elevation import elevation_gain_loss, fill_missing_elevation, smooth_elevation


def test_fill_forward_then_backward():
    out = fill_missing_elevation([np.nan, np.nan, 5.0, np.nan, 7.0, np.nan])
    assert out.tolist() == [5.0, 5.0, 5.0, 5.0, 7.0, 7.0]


def test_fill_treats_none_and_inf_as_missing():
    out = fill_missing_elevation([None, 10.0, np.inf, -np.inf, 12.0])
    assert out.tolist() == [10.0, 10.0, 10.0, 10.0, 12.0]


@pytest.mark.parametrize(
    "values",
    [
        [np.nan, np.nan, np.nan],
        [],
        [np.inf],
        [1.0, np.nan, -np.inf, 3.0],
    ],
)
def test_fill_output_is_always_finite(values):
    out = fill_missing_elevation(values)
    assert len(out) == len(values)
    assert np.all(np.isfinite(out))


def test_fill_all_missing_resolves_to_zero():
    assert fill_missing_elevation([np.nan, np.nan]).tolist() == [0.0, 0.0]


def test_fill_does_not_modify_input():
    values = np.array([np.nan, 1.0])
    fill_missing_elevation(values)
    assert np.isnan(values[0])


def test_smooth_window_one_is_identity_copy():
    values = np.array([1.0, 5.0, 2.0])
    out = smooth_elevation(values, 1)
    assert out.tolist() == values.tolist()
    assert out is not values


def test_smooth_centered_window_clipped_at_bounds():
    out = smooth_elevation([0.0, 3.0, 6.0, 9.0], 3)
    assert out.tolist() == pytest.approx([1.5, 3.0, 6.0, 7.5])


def test_smooth_skips_non_finite_neighbours():
    out = smooth_elevation([np.nan, 2.0, np.nan], 3)
    assert out.tolist() == [2.0, 2.0, 2.0]


def test_smooth_index_without_finite_neighbours_is_nan():
    out = smooth_elevation([np.nan, np.nan, np.nan, np.nan, 4.0], 3)
    assert np.isnan(out[0]) and np.isnan(out[1])
    assert out[3] == 4.0


@pytest.mark.parametrize("window", [2, 4, 0, -1])
def test_smooth_rejects_even_or_non_positive_window(window):
    with pytest.raises(ValidationError):
        smooth_elevation([1.0, 2.0, 3.0], window)


def test_gain_loss_accumulation_rule():
    gain, loss = elevation_gain_loss([100.0, 110.0, 105.0, 105.0, 120.0])
    assert gain == pytest.approx(25.0)
    assert loss == pytest.approx(5.0)


def test_gain_loss_short_input():
    assert elevation_gain_loss([100.0]) == (0.0, 0.0)
