"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Tests for flat speed calibration.
"""

from __future__ import annotations

import math

import pandas as pd
import pytest

from services.pacing.calibration import (
    calibrate_flat_speed,
    find_flat_speed_for_target_time,
    moving_time_for_flat_speed,
)
from services.pacing.errors import InfeasibleTargetError


@pytest.fixture
def flat_segments() -> pd.DataFrame:
    """10 x 1 km flat segments."""
    return pd.DataFrame({"lengthM": [1000.0] * 10, "slopePct": [0.0] * 10})


@pytest.fixture
def mixed_segments() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "lengthM": [250.0] * 8,
            "slopePct": [0.0, 5.0, 13.0, 22.0, -2.0, -5.0, -9.0, -15.0],
        }
    )


def test_moving_time_flat(flat_segments):
    assert moving_time_for_flat_speed(flat_segments, 10.0, "trained", 0.5) == pytest.approx(3600.0)


def test_moving_time_infinite_when_speed_not_positive(flat_segments):
    assert moving_time_for_flat_speed(flat_segments, 0.0, "trained", 0.5) == math.inf


def test_moving_time_monotonic_in_flat_speed(mixed_segments):
    speeds = [3.0 + 0.5 * i for i in range(45)]
    times = [moving_time_for_flat_speed(mixed_segments, v, "standard", 0.3) for v in speeds]
    assert all(t2 <= t1 for t1, t2 in zip(times, times[1:]))


def test_bisection_finds_flat_speed(flat_segments):
    v = find_flat_speed_for_target_time(flat_segments, 3600.0, "trained", 0.5)
    assert v == pytest.approx(10.0, abs=1e-6)


def test_bisection_reproduces_target_within_bracket(mixed_segments):
    target = 1800.0
    iterations = 40
    v = find_flat_speed_for_target_time(mixed_segments, target, "trained", 0.5, (3.0, 25.0), iterations)
    width = (25.0 - 3.0) / 2**iterations
    t_lo = moving_time_for_flat_speed(mixed_segments, v - width, "trained", 0.5)
    t_hi = moving_time_for_flat_speed(mixed_segments, v + width, "trained", 0.5)
    assert t_hi <= target <= t_lo


def test_bisection_runs_exact_iteration_count(flat_segments):
    # One halving: t(14) < 3600 so the upper bound moves to 14
    v = find_flat_speed_for_target_time(flat_segments, 3600.0, "trained", 0.5, (3.0, 25.0), 1)
    assert v == pytest.approx(8.5)


def test_bisection_without_guard_returns_near_bound(flat_segments):
    v = find_flat_speed_for_target_time(flat_segments, 1.0, "trained", 0.5)
    assert v == pytest.approx(25.0, abs=1e-6)


def test_calibrate_rejects_too_fast_target(flat_segments):
    # 10 km in 10 minutes needs 60 km/h
    with pytest.raises(InfeasibleTargetError, match="faster"):
        calibrate_flat_speed(flat_segments, 600.0, "trained", 0.5)


def test_calibrate_rejects_too_slow_target(flat_segments):
    # 10 km in 10 hours needs 1 km/h
    with pytest.raises(InfeasibleTargetError, match="slower"):
        calibrate_flat_speed(flat_segments, 36000.0, "trained", 0.5)


def test_calibrate_feasible_target(mixed_segments):
    v = calibrate_flat_speed(mixed_segments, 1500.0, "trained", 0.5)
    assert 3.0 < v < 25.0
    assert moving_time_for_flat_speed(mixed_segments, v, "trained", 0.5) == pytest.approx(1500.0, abs=1e-3)
