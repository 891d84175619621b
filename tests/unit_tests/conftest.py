"""Pytest fixtures for bivariate unit tests.

This module provides shared fixtures (region strips, point clouds, tables)
for testing pipeline stages in isolation.
"""

import pytest
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import Polygon, box

from bivariate.models import PointEvent, Region


def points_in_box(n, minx, miny, maxx, maxy, start_id=0):
    """Deterministic grid of n points strictly inside a bounding box."""
    xs = np.linspace(minx, maxx, n + 2)[1:-1]
    ys = np.linspace(miny, maxy, n + 2)[1:-1]
    return [
        PointEvent(id=start_id + i, latitude=float(y), longitude=float(x))
        for i, (x, y) in enumerate(zip(xs, ys))
    ]


@pytest.fixture
def strip_regions():
    """Three adjacent 1x1 degree squares A, B, C along the x axis.

    Each is given an area of 2 km² (in m²) and demographic values 2, 10, 18,
    so rates are 1, 5 and 9 per km².
    """
    return [
        Region("A", box(0, 0, 1, 1), 2_000_000.0, 2.0, "Alpha"),
        Region("B", box(1, 0, 2, 1), 2_000_000.0, 10.0, "Bravo"),
        Region("C", box(2, 0, 3, 1), 2_000_000.0, 18.0, "Charlie"),
    ]


@pytest.fixture
def strip_points():
    """10 points in A, 50 in B, 90 in C, plus 5 outside every region."""
    pts = points_in_box(10, 0, 0, 1, 1)
    pts += points_in_box(50, 1, 0, 2, 1, start_id=100)
    pts += points_in_box(90, 2, 0, 3, 1, start_id=200)
    pts += points_in_box(5, 10, 10, 11, 11, start_id=900)
    return pts


@pytest.fixture
def nine_regions():
    """Nine 1x1 squares in a row with distinct, increasing rates."""
    return [
        Region(f"R{i}", box(i, 0, i + 1, 1), 1_000_000.0, float(i + 1), f"Region {i}")
        for i in range(9)
    ]


@pytest.fixture
def points_df():
    """Small point table with one malformed row."""
    return pd.DataFrame({
        "id": [1, 2, 3, 4],
        "datetime": ["2014-05-01 21:00", "2014-05-02 22:30", None, "2014-05-04 23:15"],
        "latitude": [0.5, 0.5, np.nan, 0.5],
        "longitude": [0.5, 1.5, 2.5, 2.5],
        "shape": ["light", "disk", "circle", "triangle"],
    })


@pytest.fixture
def regions_gdf():
    """Region GeoDataFrame in EPSG:4326 with census-style columns."""
    return gpd.GeoDataFrame(
        {
            "GEOID": ["01", "02", "03"],
            "NAME": ["Alpha", "Bravo", "Charlie"],
            "estimate": [100.0, 500.0, 900.0],
            "ALAND": [1_000_000.0, 2_000_000.0, 0.0],
        },
        geometry=[box(0, 0, 1, 1), box(1, 0, 2, 1), box(2, 0, 3, 1)],
        crs="EPSG:4326",
    )


@pytest.fixture
def l_shaped_polygon():
    """Concave polygon whose bounding box covers points it does not contain."""
    return Polygon([(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)])
