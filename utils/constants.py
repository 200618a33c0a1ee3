"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

# ==============================================================================
# CHART DISPLAY SETTINGS
# ==============================================================================

CHART_WIDTH_DEFAULT = 860
PROFILE_CHART_HEIGHT = 320

# ==============================================================================
# RUNNER PROFILES
# ==============================================================================

PROFILE_LABELS_FR = {
    "trained": "Entraîné",
    "standard": "Standard",
}

# ==============================================================================
# COLOR MAPPINGS
# ==============================================================================

SLOPE_COLOR_MAPPING = {
    "down_max": "#001f3f",
    "down_extreme": "#003d66",
    "down_very_strong": "#004d26",
    "down_strong": "#15803d",
    "down_moderate": "#22c55e",
    "down_light": "#86efac",
    "flat": "#d1d5db",
    "up_light": "#eab308",
    "up_moderate": "#f97316",
    "up_strong": "#dc2626",
    "up_very_strong": "#000000",
}

SLOPE_LABELS_FR = {
    "down_max": "Descente maximale (< -12 %)",
    "down_extreme": "Descente extrême (-12 à -8 %)",
    "down_very_strong": "Descente très forte (-8 à -6 %)",
    "down_strong": "Descente forte (-6 à -4 %)",
    "down_moderate": "Descente modérée (-4 à -3 %)",
    "down_light": "Descente légère (-3 à -1 %)",
    "flat": "Plat (-1 à 1 %)",
    "up_light": "Montée légère (1 à 12 %)",
    "up_moderate": "Montée modérée (12 à 15 %)",
    "up_strong": "Montée forte (15 à 20 %)",
    "up_very_strong": "Montée très forte (> 20 %)",
}

CHECKPOINT_RULE_COLOR = "#2563eb"

# ==============================================================================
# LOCALE
# ==============================================================================

DISPLAY_LOCALE = "fr_FR"

# ==============================================================================
# SESSION STATE KEYS
# ==============================================================================

STATE_PACING_GPX = "pacing_gpx_bytes"
STATE_PACING_GPX_NAME = "pacing_gpx_name"
STATE_PACING_FORM = "pacing_form"
STATE_PACING_RESULT = "pacing_result"
