"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

EARTH_RADIUS_M = 6_371_000.0

PROFILES = ["trained", "standard"]

DEFAULT_PROFILE = "trained"
DEFAULT_CAUTION = 0.5
DEFAULT_RESAMPLE_STEP_M = 250.0
DEFAULT_SMOOTHING_WINDOW = 9

# Flat speed search interval (km/h) and fixed bisection iterations
FLAT_SPEED_BOUNDS_KMH = (3.0, 25.0)
CALIBRATION_ITERATIONS = 40
MIN_CALIBRATION_ITERATIONS = 10

# Stage boundaries closer than this (km) collapse into one
BOUNDARY_DEDUP_KM = 0.001
# A checkpoint attaches its stop to the stage ending within this distance (km)
CHECKPOINT_MATCH_KM = 0.1

# 100 m of D+ counts as 1 km of effort distance
EFFORT_GAIN_M_PER_KM = 100.0
