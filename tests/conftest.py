import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Ensure project root is importable for tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from persistence.csv_storage import CsvStorage
from services.pacing_service import PacingService


@pytest.fixture
def storage(tmp_path):
    return CsvStorage(base_dir=tmp_path)


@pytest.fixture
def service(storage):
    return PacingService(storage)


@pytest.fixture
def rolling_track():
    """~5.6 km along the equator: climb to 150 m then descend back to 100 m."""
    n = 51
    lon = np.linspace(0.0, 0.05, n)
    ele = np.concatenate([np.linspace(100.0, 250.0, 26), np.linspace(245.0, 100.0, 25)])
    return pd.DataFrame({"lat": np.zeros(n), "lon": lon, "elevationM": ele})


@pytest.fixture
def flat_track():
    """~11.1 km flat track along the equator."""
    n = 101
    return pd.DataFrame(
        {"lat": np.zeros(n), "lon": np.linspace(0.0, 0.1, n), "elevationM": np.full(n, 50.0)}
    )


def make_gpx(points, namespace="http://www.topografix.com/GPX/1/1"):
    """Build a GPX document from (lat, lon, ele) tuples; ele None omits <ele>."""
    pts = []
    for lat, lon, ele in points:
        ele_xml = f"<ele>{ele}</ele>" if ele is not None else ""
        pts.append(f'<trkpt lat="{lat}" lon="{lon}">{ele_xml}</trkpt>')
    ns_attr = f' xmlns="{namespace}"' if namespace else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<gpx version="1.1"{ns_attr}><trk><trkseg>{"".join(pts)}</trkseg></trk></gpx>'
    ).encode()


@pytest.fixture
def gpx_factory():
    return make_gpx
