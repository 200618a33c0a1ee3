"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

import altair as alt
import streamlit as st

THEME_CSS = """
<style>
:root {
    --tp-deep-blue: #293d56;
    --tp-forest: #04813c;
    --tp-sand: #e4cca0;
    --tp-text-primary: #f8fafc;
    --tp-surface: rgba(41, 61, 86, 0.96);
}

html, body, [data-testid="stAppViewContainer"] {
    background: radial-gradient(circle at top, rgba(41, 61, 86, 0.88), rgba(15, 23, 42, 0.94));
    color: var(--tp-text-primary);
}

[data-testid="stSidebar"] > div {
    background: linear-gradient(180deg, rgba(41, 61, 86, 0.95), rgba(17, 24, 39, 0.96));
    border-right: 1px solid rgba(228, 204, 160, 0.2);
}

[data-testid="stMetricValue"] {
    color: var(--tp-sand);
}

.block-container {
    padding-top: 1.5rem;
}
</style>
"""

_ALTAIR_THEME_REGISTERED = False


def _enable_altair_theme() -> None:
    global _ALTAIR_THEME_REGISTERED
    if _ALTAIR_THEME_REGISTERED:
        return

    @alt.theme.register("trail_pacer_theme", enable=True)
    def _theme() -> alt.theme.ThemeConfig:
        return {
            "config": {
                "background": "rgba(18, 28, 41, 0.01)",
                "view": {"strokeWidth": 0, "fill": "rgba(18, 28, 41, 0.8)"},
                "axis": {
                    "labelColor": "#f4f7fb",
                    "titleColor": "#e4cca0",
                    "gridColor": "rgba(96, 172, 132, 0.15)",
                    "domainColor": "rgba(228, 204, 160, 0.25)",
                },
                "legend": {
                    "labelColor": "#f4f7fb",
                    "titleColor": "#e4cca0",
                    "labelLimit": 260,
                    "orient": "right",
                },
                "title": {"color": "#e4cca0", "fontSize": 16, "fontWeight": 600},
            }
        }

    _ALTAIR_THEME_REGISTERED = True


def apply_theme() -> None:
    """Inject global CSS theme for Streamlit pages."""
    st.markdown(THEME_CSS, unsafe_allow_html=True)
    _enable_altair_theme()
