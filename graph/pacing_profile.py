"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Pacing profile visualization: resampled elevation coloured by slope class,
with checkpoint markers.
"""

from __future__ import annotations

from typing import Sequence

import altair as alt
import pandas as pd
import streamlit as st
from streamlit.logger import get_logger

from services.pacing.models import Checkpoint
from utils.constants import (
    CHART_WIDTH_DEFAULT,
    CHECKPOINT_RULE_COLOR,
    PROFILE_CHART_HEIGHT,
    SLOPE_COLOR_MAPPING,
    SLOPE_LABELS_FR,
)

logger = get_logger(__name__)


def build_profile_frame(segments: pd.DataFrame, samples: pd.DataFrame) -> pd.DataFrame:
    """One row per segment end point, both ends keyed by segment for area fills."""
    if segments.empty or samples.empty:
        return pd.DataFrame(
            columns=["segment", "distanceKm", "elevationM", "slopeClass", "slopePct", "pace"]
        )

    ele_by_dist = dict(zip(samples["distanceM"], samples["elevationM"]))
    rows = []
    for _, seg in segments.iterrows():
        for dist in (seg["fromM"], seg["toM"]):
            rows.append(
                {
                    "segment": int(seg["index"]),
                    "distanceKm": float(dist) / 1000.0,
                    "elevationM": float(ele_by_dist.get(dist, float("nan"))),
                    "slopeClass": seg["slopeClass"],
                    "slopePct": float(seg["slopePct"]),
                    "pace": seg["pace"],
                }
            )
    return pd.DataFrame(rows)


def build_profile_chart(
    segments: pd.DataFrame,
    samples: pd.DataFrame,
    checkpoints: Sequence[Checkpoint] = (),
) -> alt.LayerChart | None:
    """Layered altair chart, or None when there is nothing to plot."""
    plot_df = build_profile_frame(segments, samples).dropna(subset=["elevationM"])
    if plot_df.empty:
        return None

    y_min = float(plot_df["elevationM"].min() - 20)
    y_max = float(plot_df["elevationM"].max() + 20)
    x_scale = alt.Scale(domain=[0.0, float(plot_df["distanceKm"].max())], nice=False)
    y_scale = alt.Scale(domain=[y_min, y_max], nice=True)

    classes = [c for c in SLOPE_COLOR_MAPPING if c in set(plot_df["slopeClass"])]
    plot_df = plot_df.assign(terrain=plot_df["slopeClass"].map(SLOPE_LABELS_FR))

    area = (
        alt.Chart(plot_df)
        .mark_area(opacity=0.5)
        .encode(
            x=alt.X("distanceKm:Q", title="Distance (km)", scale=x_scale),
            y=alt.Y("elevationM:Q", title="Altitude (m)", scale=y_scale),
            y2=alt.datum(y_min),
            color=alt.Color(
                "terrain:N",
                title="Terrain",
                scale=alt.Scale(
                    domain=[SLOPE_LABELS_FR[c] for c in classes],
                    range=[SLOPE_COLOR_MAPPING[c] for c in classes],
                ),
            ),
            # One area per segment so adjacent segments of the same class are not merged
            detail=alt.Detail("segment:N"),
            tooltip=[
                alt.Tooltip("distanceKm:Q", title="Distance", format=".2f"),
                alt.Tooltip("elevationM:Q", title="Altitude", format=".0f"),
                alt.Tooltip("slopePct:Q", title="Pente (%)", format=".1f"),
                alt.Tooltip("pace:N", title="Allure"),
            ],
        )
    )

    line = (
        alt.Chart(plot_df)
        .mark_line(color="#000000", strokeWidth=1.5)
        .encode(
            x=alt.X("distanceKm:Q", scale=x_scale),
            y=alt.Y("elevationM:Q", scale=y_scale),
            detail=alt.Detail("segment:N"),
        )
    )

    layers = [area, line]

    if checkpoints:
        cp_df = pd.DataFrame(
            [
                {
                    "distanceKm": float(cp.position_km),
                    "elevationM": y_max,
                    "label": f"CP {idx}",
                    "stop": f"{cp.stop_minutes:g} min",
                }
                for idx, cp in enumerate(sorted(checkpoints, key=lambda c: c.position_km), start=1)
            ]
        )
        rules = (
            alt.Chart(cp_df)
            .mark_rule(strokeWidth=2, strokeDash=[5, 5], color=CHECKPOINT_RULE_COLOR)
            .encode(
                x=alt.X("distanceKm:Q", scale=x_scale),
                tooltip=[
                    alt.Tooltip("label:N", title="Point de contrôle"),
                    alt.Tooltip("distanceKm:Q", title="Distance", format=".2f"),
                    alt.Tooltip("stop:N", title="Arrêt"),
                ],
            )
        )
        labels = (
            alt.Chart(cp_df)
            .mark_text(align="left", dx=5, dy=10, fontSize=12, fontWeight="bold", color=CHECKPOINT_RULE_COLOR)
            .encode(
                x=alt.X("distanceKm:Q", scale=x_scale),
                y=alt.Y("elevationM:Q", scale=y_scale),
                text=alt.Text("label:N"),
            )
        )
        layers.extend([rules, labels])

    return alt.layer(*layers).properties(
        width=CHART_WIDTH_DEFAULT,
        height=PROFILE_CHART_HEIGHT,
        title="Profil d'élévation et pentes",
    )


def render_pacing_profile(
    segments: pd.DataFrame, samples: pd.DataFrame, checkpoints: Sequence[Checkpoint] = ()
) -> None:
    chart = build_profile_chart(segments, samples, checkpoints)
    if chart is None:
        st.warning("Données insuffisantes pour afficher le profil.")
        return
    logger.debug("Rendering pacing profile with %d segments", len(segments))
    st.altair_chart(chart, theme=None, use_container_width=True)
