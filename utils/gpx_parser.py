"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

GPX file parser for route and track data.

Only positions and elevation are extracted; timestamps are ignored since a
pacing plan is distance-referenced.
"""

from __future__ import annotations

import math
from typing import Optional

import pandas as pd
from lxml import etree
from streamlit.logger import get_logger

from services.pacing.errors import ParseError

logger = get_logger(__name__)


def _float_or_none(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        value = float(text.strip())
    except (ValueError, TypeError):
        return None
    return value if math.isfinite(value) else None


def parse_gpx_points(gpx_bytes: bytes | str) -> pd.DataFrame:
    """Parse every track point of a GPX file.

    All trkpt of every trk/trkseg are concatenated in file order. Namespaces
    are ignored so GPX 1.0, 1.1 and unqualified files behave the same.
    Points without usable lat/lon are skipped; a missing or invalid <ele>
    becomes NaN.

    Args:
        gpx_bytes: Raw GPX file content

    Returns:
        DataFrame with columns: lat, lon, elevationM

    Raises:
        ParseError: invalid XML or fewer than 2 usable points
    """
    if isinstance(gpx_bytes, str):
        gpx_bytes = gpx_bytes.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(gpx_bytes, parser=parser)
    except etree.XMLSyntaxError as e:
        logger.warning("Invalid GPX XML: %s", e)
        raise ParseError(f"Invalid GPX XML: {e}") from e

    if root is None:
        raise ParseError("Empty GPX document")

    trkpts = root.xpath(".//*[local-name()='trkpt']")
    rows = []
    skipped = 0
    for trkpt in trkpts:
        lat = _float_or_none(trkpt.get("lat"))
        lon = _float_or_none(trkpt.get("lon"))
        if lat is None or lon is None:
            skipped += 1
            continue

        ele_elems = trkpt.xpath("./*[local-name()='ele']")
        elevation = _float_or_none(ele_elems[0].text) if ele_elems else None

        rows.append(
            {
                "lat": lat,
                "lon": lon,
                "elevationM": elevation if elevation is not None else float("nan"),
            }
        )

    if skipped:
        logger.debug("Skipped %d track points without valid coordinates", skipped)

    if len(rows) < 2:
        logger.warning("Insufficient track points: %d < 2", len(rows))
        raise ParseError(f"GPX must contain at least 2 track points, found {len(rows)}")

    df = pd.DataFrame(rows, columns=["lat", "lon", "elevationM"])
    logger.debug("Parsed GPX: %d points", len(df))
    return df
