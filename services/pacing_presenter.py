"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Pure helpers turning a PacingResult into JSON payloads and display tables.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from services.pacing.models import PacingResult
from utils.constants import SLOPE_LABELS_FR
from utils.formatting import fmt_decimal, fmt_km, fmt_m, fmt_pct, fmt_speed_kmh
from utils.time import format_hms


def _round(value: Any, ndigits: int) -> Optional[float]:
    if value is None:
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(v):
        return None
    return round(v, ndigits)


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    # numpy scalars are not JSON serializable
    out = []
    for row in df.to_dict(orient="records"):
        clean = {}
        for k, v in row.items():
            if isinstance(v, np.integer):
                v = int(v)
            elif isinstance(v, np.floating):
                v = float(v)
            clean[k] = v
        out.append(clean)
    return out


def build_result_payload(result: PacingResult, source_name: Optional[str] = None) -> Dict[str, Any]:
    """JSON-ready dict: input, totals, calibration, steps, perKm, segments, samples."""
    request = result.request
    totals = result.totals
    input_section = request.to_dict()
    input_section["targetTotalSec"] = totals["targetTotalSec"]
    if source_name:
        input_section["file"] = source_name

    totals_section = {
        "totalDistanceM": _round(totals["totalDistanceM"], 2),
        "totalDistanceKm": _round(totals["totalDistanceKm"], 3),
        "allPointsGainM": totals["allPointsGainM"],
        "allPointsLossM": totals["allPointsLossM"],
        "stageGainM": totals["stageGainM"],
        "stageLossM": totals["stageLossM"],
        "segmentGainM": totals["segmentGainM"],
        "segmentLossM": totals["segmentLossM"],
        "targetTotal": format_hms(totals["targetTotalSec"]),
        "targetTotalSec": totals["targetTotalSec"],
        "checkpointStopSec": totals["checkpointStopSec"],
        "restStopSec": totals["restStopSec"],
        "stopTime": format_hms(totals["stopTimeSec"]),
        "stopTimeSec": totals["stopTimeSec"],
        "movingTarget": format_hms(totals["movingTargetSec"]),
        "movingTargetSec": totals["movingTargetSec"],
        "computedMoving": format_hms(totals["computedMovingSec"]),
        "computedMovingSec": totals["computedMovingSec"],
        "computedTotal": format_hms(totals["computedTotalSec"]),
        "computedTotalSec": totals["computedTotalSec"],
        "avgPace": totals["avgPace"],
        "effortDistanceKm": _round(totals["effortDistanceKm"], 3),
        "avgEffortPace": totals["avgEffortPace"],
    }

    calibration = result.calibration
    calibration_section = {
        "flatSpeedKmh": _round(calibration["flatSpeedKmh"], 4),
        "flatPace": calibration["flatPace"],
        "iterations": calibration["iterations"],
        "speedBoundsKmh": calibration["speedBoundsKmh"],
    }

    steps = []
    for row in _records(result.stages):
        steps.append(
            {
                "index": row["index"],
                "fromKm": _round(row["fromKm"], 3),
                "toKm": _round(row["toKm"], 3),
                "distanceKm": _round(row["distanceKm"], 3),
                "gainM": row["gainM"],
                "lossM": row["lossM"],
                "movingSec": row["movingSec"],
                "moving": format_hms(row["movingSec"]),
                "stopSec": row["stopSec"],
                "stop": format_hms(row["stopSec"]),
                "totalSec": row["totalSec"],
                "total": format_hms(row["totalSec"]),
                "avgSpeedKmh": _round(row["avgSpeedKmh"], 2),
                "avgPace": row["avgPace"],
            }
        )

    per_km = []
    for row in _records(result.per_km):
        per_km.append(
            {
                "km": row["km"],
                "segmentsCount": row["segmentsCount"],
                "distanceKm": _round(row["distanceKm"], 3),
                "timeSec": row["timeSec"],
                "time": format_hms(row["timeSec"]),
                "avgSpeedKmh": _round(row["avgSpeedKmh"], 2),
                "avgPace": row["avgPace"],
                "avgSlopePct": _round(row["avgSlopePct"], 2),
                "gainM": row["gainM"],
                "lossM": row["lossM"],
            }
        )

    segments = []
    for row in _records(result.segments):
        segments.append(
            {
                "index": row["index"],
                "fromM": _round(row["fromM"], 2),
                "toM": _round(row["toM"], 2),
                "lengthM": _round(row["lengthM"], 2),
                "deltaElevM": _round(row["deltaElevM"], 2),
                "slopePct": _round(row["slopePct"], 2),
                "slopeClass": row["slopeClass"],
                "speedKmh": _round(row["speedKmh"], 3),
                "pace": row["pace"],
                "timeSec": row["timeSec"],
                "time": format_hms(row["timeSec"]),
            }
        )

    samples = [
        {
            "index": row["index"],
            "distanceM": _round(row["distanceM"], 2),
            "lat": _round(row["lat"], 6),
            "lon": _round(row["lon"], 6),
            "eleM": _round(row["elevationM"], 2),
        }
        for row in _records(result.samples)
    ]

    return {
        "input": input_section,
        "totals": totals_section,
        "calibration": calibration_section,
        "steps": steps,
        "perKm": per_km,
        "segments": segments,
        "samples": samples,
    }


def build_totals_cards(result: PacingResult) -> List[tuple[str, str]]:
    """(label, value) pairs for the summary header."""
    totals = result.totals
    return [
        ("Distance", fmt_km(totals["totalDistanceKm"], 2)),
        ("D+ (points bruts)", fmt_m(totals["allPointsGainM"])),
        ("D- (points bruts)", fmt_m(totals["allPointsLossM"])),
        ("D+ (étapes)", fmt_m(totals["stageGainM"])),
        ("D- (étapes)", fmt_m(totals["stageLossM"])),
        ("Temps cible", format_hms(totals["targetTotalSec"])),
        ("Arrêts", format_hms(totals["stopTimeSec"])),
        ("Temps de course cible", format_hms(totals["movingTargetSec"])),
        ("Temps de course calculé", format_hms(totals["computedMovingSec"])),
        ("Temps total calculé", format_hms(totals["computedTotalSec"])),
        ("Allure moyenne", f"{totals['avgPace'] or '-'}/km"),
        ("Distance effort", fmt_km(totals["effortDistanceKm"], 1)),
        ("Allure effort", f"{totals['avgEffortPace'] or '-'}/km"),
        ("Vitesse sur plat", fmt_speed_kmh(result.calibration["flatSpeedKmh"])),
        ("Allure sur plat", f"{result.calibration['flatPace'] or '-'}/km"),
    ]


def build_stages_table(stages: pd.DataFrame) -> pd.DataFrame:
    columns = [
        "Étape",
        "De (km)",
        "À (km)",
        "Distance",
        "D+",
        "D-",
        "Temps de course",
        "Arrêt",
        "Temps total",
        "Vitesse",
        "Allure",
    ]
    if stages.empty:
        return pd.DataFrame(columns=columns)
    rows = []
    for _, s in stages.iterrows():
        rows.append(
            {
                "Étape": int(s["index"]),
                "De (km)": fmt_decimal(float(s["fromKm"]), 2),
                "À (km)": fmt_decimal(float(s["toKm"]), 2),
                "Distance": fmt_km(float(s["distanceKm"]), 2),
                "D+": fmt_m(s["gainM"]),
                "D-": fmt_m(s["lossM"]),
                "Temps de course": format_hms(s["movingSec"]),
                "Arrêt": format_hms(s["stopSec"]),
                "Temps total": format_hms(s["totalSec"]),
                "Vitesse": fmt_speed_kmh(float(s["avgSpeedKmh"])),
                "Allure": f"{s['avgPace']}/km" if s["avgPace"] else "-",
            }
        )
    return pd.DataFrame(rows, columns=columns)


def build_per_km_table(per_km: pd.DataFrame) -> pd.DataFrame:
    columns = ["Km", "Distance", "Temps", "Allure", "Vitesse", "Pente moy.", "D+", "D-"]
    if per_km.empty:
        return pd.DataFrame(columns=columns)
    rows = []
    for _, k in per_km.iterrows():
        rows.append(
            {
                "Km": int(k["km"]),
                "Distance": fmt_km(float(k["distanceKm"]), 3),
                "Temps": format_hms(k["timeSec"]),
                "Allure": f"{k['avgPace']}/km" if k["avgPace"] else "-",
                "Vitesse": fmt_speed_kmh(float(k["avgSpeedKmh"])),
                "Pente moy.": fmt_pct(float(k["avgSlopePct"])),
                "D+": fmt_m(k["gainM"]),
                "D-": fmt_m(k["lossM"]),
            }
        )
    return pd.DataFrame(rows, columns=columns)


def build_segments_table(segments: pd.DataFrame) -> pd.DataFrame:
    columns = ["De (km)", "À (km)", "Distance", "Temps", "Allure", "Vitesse", "Pente", "Terrain"]
    if segments.empty:
        return pd.DataFrame(columns=columns)
    rows = []
    for _, seg in segments.iterrows():
        rows.append(
            {
                "De (km)": fmt_decimal(float(seg["fromM"]) / 1000.0, 3),
                "À (km)": fmt_decimal(float(seg["toM"]) / 1000.0, 3),
                "Distance": fmt_km(float(seg["lengthM"]) / 1000.0, 3),
                "Temps": format_hms(seg["timeSec"]),
                "Allure": f"{seg['pace']}/km" if seg["pace"] else "-",
                "Vitesse": fmt_speed_kmh(float(seg["speedKmh"])),
                "Pente": fmt_pct(float(seg["slopePct"])),
                "Terrain": SLOPE_LABELS_FR.get(seg["slopeClass"], seg["slopeClass"]),
            }
        )
    return pd.DataFrame(rows, columns=columns)
