"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

import altair as alt
import pandas as pd

from graph.pacing_profile import build_profile_chart, build_profile_frame
from services.pacing.models import Checkpoint, PacingRequest
from services.pacing_service import compute_pacing


def test_profile_frame_has_two_rows_per_segment(rolling_track):
    result = compute_pacing(rolling_track, PacingRequest(target_time="01:00"))
    frame = build_profile_frame(result.segments, result.samples)
    assert len(frame) == 2 * len(result.segments)
    assert frame["elevationM"].notna().all()
    assert frame["distanceKm"].max() == result.totals["totalDistanceKm"]


def test_profile_chart_with_checkpoints(rolling_track):
    request = PacingRequest(target_time="01:00", checkpoints=(Checkpoint(3.0, 5.0),))
    result = compute_pacing(rolling_track, request)
    chart = build_profile_chart(result.segments, result.samples, request.checkpoints)
    assert isinstance(chart, alt.LayerChart)
    assert len(chart.layer) == 4
    chart.to_dict()


def test_profile_chart_empty():
    assert build_profile_chart(pd.DataFrame(), pd.DataFrame()) is None
