"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Tests for the pacing service (end-to-end pipeline and saved configurations).
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from services.pacing.calibration import moving_time_for_flat_speed
from services.pacing.errors import (
    FormatError,
    InfeasibleTargetError,
    ParseError,
    ValidationError,
)
from services.pacing.models import Checkpoint, PacingRequest, RestPeriods
from services.pacing_service import PacingService, compute_pacing

TWO_POINTS = [
    {"lat": 0.0, "lon": 0.0, "ele": 0.0},
    {"lat": 0.0, "lon": 0.01, "ele": 100.0},
]


def test_two_point_track_distance_and_single_segment():
    request = PacingRequest(target_time="00:15:00", smoothing_window=1, resample_step_m=2000.0)
    result = compute_pacing(TWO_POINTS, request)

    assert result.totals["totalDistanceKm"] == pytest.approx(1.1119, abs=1e-4)
    assert len(result.segments) == 1
    assert result.segments["slopePct"].iloc[0] == pytest.approx(8.993, abs=1e-3)
    # 1.1119 km in 15 min at v / (1 + 0.04 * slope)
    assert result.calibration["flatSpeedKmh"] == pytest.approx(6.048, abs=2e-3)
    moving = moving_time_for_flat_speed(
        result.segments, result.calibration["flatSpeedKmh"], "trained", 0.5
    )
    assert moving == pytest.approx(900.0, abs=1e-6)
    assert result.totals["computedMovingSec"] == 900


def test_two_point_steep_climb_one_hour_is_unreachable():
    # A climb above 20 % runs at a fixed speed whatever the flat speed,
    # so 1.1 km takes about 929 s and cannot be stretched to an hour
    points = [{"lat": 0.0, "lon": 0.0, "ele": 0.0}, {"lat": 0.0, "lon": 0.01, "ele": 300.0}]
    request = PacingRequest(target_time="01:00:00", smoothing_window=1, resample_step_m=2000.0)
    with pytest.raises(InfeasibleTargetError):
        compute_pacing(points, request)


def test_two_point_default_smoothing_one_hour_is_unreachable():
    # Default smoothing averages both points: the 1.1 km track becomes flat and
    # one hour would need less than the minimum flat speed
    with pytest.raises(InfeasibleTargetError, match="slower"):
        compute_pacing(TWO_POINTS, PacingRequest(target_time="01:00:00"))


def test_stop_time_exceeding_target_is_rejected(flat_track):
    request = PacingRequest(target_time="01:00", checkpoints=(Checkpoint(5.0, 61.0),))
    with pytest.raises(ValidationError, match="stop time exceeds target"):
        compute_pacing(flat_track, request)


def test_stop_time_equal_to_target_is_rejected(flat_track):
    request = PacingRequest(target_time="01:00", rest=RestPeriods(2, 30.0))
    with pytest.raises(ValidationError, match="stop time exceeds target"):
        compute_pacing(flat_track, request)


def test_even_smoothing_window_is_rejected(flat_track):
    with pytest.raises(ValidationError):
        compute_pacing(flat_track, PacingRequest(target_time="01:00", smoothing_window=2))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"profile": "elite"},
        {"caution": 1.5},
        {"caution": -0.1},
        {"resample_step_m": 0.0},
        {"iterations": 5},
        {"flat_speed_bounds_kmh": (10.0, 5.0)},
        {"checkpoints": (Checkpoint(0.0, 5.0),)},
        {"checkpoints": (Checkpoint(20.0, 5.0),)},
        {"checkpoints": (Checkpoint(3.0, -1.0),)},
        {"rest": RestPeriods(-1, 10.0)},
        {"target_time": "00:00"},
    ],
)
def test_invalid_inputs_raise_validation_error(flat_track, kwargs):
    params = {"target_time": "01:00", **kwargs}
    with pytest.raises(ValidationError):
        compute_pacing(flat_track, PacingRequest(**params))


@pytest.mark.parametrize("target", ["1h30", "01:30:00:00", "ab:cd", ""])
def test_malformed_target_raises_format_error(flat_track, target):
    with pytest.raises(FormatError):
        compute_pacing(flat_track, PacingRequest(target_time=target))


def test_single_point_is_parse_error():
    with pytest.raises(ParseError):
        compute_pacing([{"lat": 0.0, "lon": 0.0, "ele": 0.0}], PacingRequest(target_time="01:00"))


def test_zero_length_track_is_parse_error():
    points = [{"lat": 1.0, "lon": 1.0, "ele": 10.0}] * 3
    with pytest.raises(ParseError):
        compute_pacing(points, PacingRequest(target_time="01:00"))


def test_flat_track_calibrates_to_average_speed(flat_track):
    result = compute_pacing(flat_track, PacingRequest(target_time="01:00:00"))
    total_km = result.totals["totalDistanceKm"]

    assert result.calibration["flatSpeedKmh"] == pytest.approx(total_km, rel=1e-6)
    # Rounded per-segment seconds drift by at most half a second each
    assert abs(result.totals["computedMovingSec"] - 3600) <= len(result.segments) / 2
    assert result.samples["distanceM"].iloc[-1] == result.totals["totalDistanceM"]


def test_time_sums_match_rounded_segment_seconds(rolling_track):
    request = PacingRequest(
        target_time="01:00",
        checkpoints=(Checkpoint(2.0, 5.0), Checkpoint(4.0, 10.0)),
        rest=RestPeriods(1, 3.0),
    )
    result = compute_pacing(rolling_track, request)
    segment_sum = int(result.segments["timeSec"].sum())

    assert int(result.per_km["timeSec"].sum()) == segment_sum
    assert int(result.stages["movingSec"].sum()) == segment_sum
    assert result.totals["computedMovingSec"] == segment_sum
    assert result.totals["computedTotalSec"] == segment_sum + 900 + 180


def test_stages_carry_checkpoint_stops(rolling_track):
    request = PacingRequest(
        target_time="01:00", checkpoints=(Checkpoint(4.0, 10.0), Checkpoint(2.0, 5.0))
    )
    result = compute_pacing(rolling_track, request)
    stages = result.stages

    assert stages["fromKm"].tolist()[:3] == [0.0, 2.0, 4.0]
    assert stages["stopSec"].tolist() == [300, 600, 0]
    assert result.totals["checkpointStopSec"] == 900
    assert result.totals["movingTargetSec"] == 3600 - 900


def test_raw_gain_totals_are_kept_separately(rolling_track):
    request = PacingRequest(target_time="01:00", checkpoints=(Checkpoint(2.5, 0.0),))
    totals = compute_pacing(rolling_track, request).totals

    assert totals["allPointsGainM"] == 150
    assert totals["allPointsLossM"] == 150
    for key in ("stageGainM", "stageLossM", "segmentGainM", "segmentLossM"):
        assert key in totals
    # Smoothing flattens the summit, so segment gain is below the raw figure
    assert totals["segmentGainM"] < totals["allPointsGainM"]
    assert totals["effortDistanceKm"] == pytest.approx(
        totals["totalDistanceKm"] + totals["stageGainM"] / 100.0
    )


def test_raw_gain_uses_filled_elevation():
    n = 21
    ele = np.linspace(100.0, 200.0, n)
    ele[:3] = np.nan
    points = pd.DataFrame({"lat": np.zeros(n), "lon": np.linspace(0.0, 0.02, n), "elevationM": ele})
    totals = compute_pacing(points, PacingRequest(target_time="00:20")).totals
    # Leading gap back-filled from 115 m
    assert totals["allPointsGainM"] == 85
    assert totals["allPointsLossM"] == 0


def test_input_points_are_not_mutated(rolling_track):
    before = rolling_track.copy()
    compute_pacing(rolling_track, PacingRequest(target_time="01:00"))
    pd.testing.assert_frame_equal(rolling_track, before)


def test_compute_pacing_from_gpx(service: PacingService, gpx_factory):
    points = [(0.0, 0.001 * i, 100.0 + i) for i in range(21)]
    result = service.compute_pacing_from_gpx(gpx_factory(points), PacingRequest(target_time="00:15"))
    assert result.totals["totalDistanceKm"] == pytest.approx(2.2239, abs=1e-3)
    assert result.totals["targetTotalSec"] == 900


def test_compute_pacing_from_invalid_gpx(service: PacingService):
    with pytest.raises(ParseError):
        service.compute_pacing_from_gpx(b"<gpx><trk>", PacingRequest(target_time="01:00"))


def test_save_and_load_configuration(service: PacingService):
    request = PacingRequest(
        target_time="24:00",
        profile="standard",
        caution=0.7,
        checkpoints=(Checkpoint(42.5, 10.0), Checkpoint(80.0, 20.0)),
        rest=RestPeriods(2, 15.0),
        resample_step_m=200.0,
        smoothing_window=7,
    )
    config_id = service.save_configuration("UTMB", request)
    assert config_id

    loaded = service.load_configuration("UTMB")
    assert loaded == request
    assert service.load_configuration(config_id) == request


def test_save_configuration_same_name_updates(service: PacingService):
    service.save_configuration("Race", PacingRequest(target_time="10:00"))
    service.save_configuration("Race", PacingRequest(target_time="11:30"))

    listed = service.list_configurations()
    assert listed["name"].tolist() == ["Race"]
    assert service.load_configuration("Race").target_time == "11:30"


def test_save_configuration_requires_name(service: PacingService):
    with pytest.raises(ValidationError):
        service.save_configuration("   ", PacingRequest(target_time="10:00"))


def test_delete_configuration(service: PacingService):
    service.save_configuration("A", PacingRequest(target_time="10:00"))
    service.save_configuration("B", PacingRequest(target_time="12:00"))

    assert service.delete_configuration("A") is True
    assert service.load_configuration("A") is None
    assert service.delete_configuration("A") is False
    assert service.list_configurations()["name"].tolist() == ["B"]


def test_configuration_lookup_ignores_surrounding_spaces(service: PacingService):
    request = PacingRequest(target_time="24:00")
    service.save_configuration(" UTMB ", request)

    assert service.load_configuration(" UTMB ") == request
    assert service.load_configuration("UTMB") == request
    assert service.delete_configuration("  UTMB") is True
    assert service.load_configuration("UTMB") is None


def test_stage_stops_independent_of_checkpoint_entry_order(flat_track):
    checkpoints = (Checkpoint(4.98, 7.0), Checkpoint(5.05, 3.0))
    forward = compute_pacing(flat_track, PacingRequest(target_time="01:00", checkpoints=checkpoints))
    backward = compute_pacing(
        flat_track, PacingRequest(target_time="01:00", checkpoints=tuple(reversed(checkpoints)))
    )

    assert forward.stages["stopSec"].tolist() == [420, 420, 0]
    assert backward.stages["stopSec"].tolist() == forward.stages["stopSec"].tolist()
    assert backward.totals == forward.totals


def test_list_configurations_empty(service: PacingService):
    listed = service.list_configurations()
    assert listed.empty
    assert "name" in listed.columns
