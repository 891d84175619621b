"""Loading and writing utilities around the core pipeline.

Reads point events from tabular files and region polygons from vector
files, converts them to typed records, and writes the classified regions,
legend and report back out.
"""
from __future__ import annotations

import json
import os
import pathlib
import warnings
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import Point

from bivariate.errors import MalformedRecordWarning
from bivariate.models import (
    ClassifiedRegion,
    LegendCell,
    PipelineReport,
    PointEvent,
    Region,
)

_CSV_SUFFIXES = {".csv", ".tsv", ".txt"}


def _ensure_parent(path: str | pathlib.Path) -> None:
    out_dir = os.path.dirname(str(path))
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)


def load_points_df(
    path: str | pathlib.Path,
    lat_col: str = "latitude",
    lon_col: str = "longitude",
) -> pd.DataFrame:
    """Load point events from CSV (optionally compressed), JSON or JSONL.

    Coordinates are read as WGS84 latitude/longitude. Rows with missing or
    out-of-range coordinates are kept with NaN coordinates, so the join
    counts them as malformed. JSONL lines that fail to parse are dropped;
    their number is stored in ``df.attrs["skipped_lines"]``. Both cases
    emit ``MalformedRecordWarning``.

    Args:
        path: Input file (.csv/.tsv with optional .gz/.bz2/.zip/.xz suffix,
            .json array of objects, or .jsonl).
        lat_col: Name of latitude column (default: "latitude").
        lon_col: Name of longitude column (default: "longitude").

    Returns:
        DataFrame with numeric coordinate columns.

    Raises:
        FileNotFoundError: If input file doesn't exist.
        ValueError: If file format is unsupported or coordinate columns are missing.
    """
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {p}")

    suffixes = [s.lower() for s in p.suffixes]
    if any(s in _CSV_SUFFIXES for s in suffixes):
        sep = "\t" if ".tsv" in suffixes else ","
        df = pd.read_csv(p, sep=sep, low_memory=False)
    elif suffixes and suffixes[-1] == ".jsonl":
        records = []
        bad_lines = 0
        with p.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    try:
                        records.append(json.loads(line))
                    except json.JSONDecodeError:
                        bad_lines += 1
        df = pd.DataFrame(records)
        df.attrs["skipped_lines"] = bad_lines
        if bad_lines:
            warnings.warn(
                f"skipped {bad_lines} unparseable lines in {p}",
                MalformedRecordWarning,
                stacklevel=2,
            )
    elif suffixes and suffixes[-1] == ".json":
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of objects in {p}")
        df = pd.DataFrame(data)
    else:
        raise ValueError(f"Unsupported file format: {''.join(suffixes)} (use .csv, .json or .jsonl)")

    missing = {lat_col, lon_col} - set(df.columns)
    if missing:
        raise ValueError(
            f"Missing required columns: {sorted(missing)}. "
            f"Available columns: {sorted(df.columns.tolist())}"
        )

    df[lat_col] = pd.to_numeric(df[lat_col], errors="coerce")
    df[lon_col] = pd.to_numeric(df[lon_col], errors="coerce")
    out_of_range = ~df[lat_col].between(-90.0, 90.0) | ~df[lon_col].between(-180.0, 180.0)
    out_of_range &= df[lat_col].notna() & df[lon_col].notna()
    if out_of_range.any():
        df.loc[out_of_range, [lat_col, lon_col]] = np.nan
        warnings.warn(
            f"{int(out_of_range.sum())} points with out-of-range coordinates in {p}",
            MalformedRecordWarning,
            stacklevel=2,
        )
    df.attrs.setdefault("skipped_lines", 0)
    return df


def points_from_df(
    df: pd.DataFrame,
    id_col: Optional[str] = "id",
    lat_col: str = "latitude",
    lon_col: str = "longitude",
    timestamp_col: Optional[str] = "datetime",
) -> List[PointEvent]:
    """Convert a point table to PointEvent records.

    Columns other than id, coordinates and timestamp go to ``attributes``.
    A missing id column falls back to the row position.
    """
    core = {c for c in (id_col, lat_col, lon_col, timestamp_col) if c}
    events = []
    for pos, row in enumerate(df.to_dict("records")):
        ts = row.get(timestamp_col) if timestamp_col else None
        events.append(
            PointEvent(
                id=row.get(id_col, pos) if id_col else pos,
                latitude=row.get(lat_col),
                longitude=row.get(lon_col),
                timestamp=None if ts is None or pd.isna(ts) else str(ts),
                attributes={k: v for k, v in row.items() if k not in core},
            )
        )
    return events


def points_to_gdf(points: Sequence[PointEvent], crs: str = "EPSG:4326") -> gpd.GeoDataFrame:
    """Build a GeoDataFrame of the valid point events (for plotting)."""
    valid = [p for p in points if p.is_valid]
    return gpd.GeoDataFrame(
        {"id": [p.id for p in valid]},
        geometry=[Point(float(p.longitude), float(p.latitude)) for p in valid],
        crs=crs,
    )


def load_regions_gdf(path: str | pathlib.Path) -> gpd.GeoDataFrame:
    """Load region polygons from any vector format geopandas can read.

    Raises:
        FileNotFoundError: If input file doesn't exist.
    """
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {p}")
    return gpd.read_file(p)


def compute_area_m2(gdf: gpd.GeoDataFrame, area_crs: str = "EPSG:6933") -> pd.Series:
    """Polygon areas in square metres, measured in an equal-area CRS.

    Missing geometries yield NaN. A GeoDataFrame without a CRS is assumed
    to be EPSG:4326.
    """
    if gdf.crs is None:
        gdf = gdf.set_crs("EPSG:4326")
    return gdf.to_crs(area_crs).geometry.area


def regions_from_gdf(
    gdf: gpd.GeoDataFrame,
    id_col: str = "GEOID",
    name_col: Optional[str] = "NAME",
    value_col: str = "estimate",
    area_col: Optional[str] = None,
    crs: str = "EPSG:4326",
    area_crs: str = "EPSG:6933",
) -> List[Region]:
    """Convert a region GeoDataFrame to Region records.

    Boundaries are brought into ``crs`` (the point CRS) here, in the loading
    layer, so the join can compare them directly with point coordinates.

    Args:
        gdf: Regions with polygon geometry.
        id_col: Region identifier column.
        name_col: Display name column (optional).
        value_col: Demographic measure column.
        area_col: Column holding area in m². If None or absent, area is
            computed from the geometry in ``area_crs``.
        crs: CRS of the point events.
        area_crs: Equal-area CRS used when computing areas.

    Raises:
        ValueError: If the id or value column is missing.
    """
    missing = {id_col, value_col} - set(gdf.columns)
    if missing:
        raise ValueError(
            f"Missing required columns: {sorted(missing)}. "
            f"Available columns: {sorted(gdf.columns.tolist())}"
        )

    if gdf.crs is None:
        gdf = gdf.set_crs(crs)

    if area_col and area_col in gdf.columns:
        areas = pd.to_numeric(gdf[area_col], errors="coerce")
    else:
        areas = compute_area_m2(gdf, area_crs)

    if gdf.crs != crs:
        gdf = gdf.to_crs(crs)

    values = pd.to_numeric(gdf[value_col], errors="coerce")
    names = gdf[name_col] if name_col and name_col in gdf.columns else None

    regions = []
    for i in range(len(gdf)):
        geom = gdf.geometry.iloc[i]
        area = areas.iloc[i]
        value = values.iloc[i]
        regions.append(
            Region(
                region_id=str(gdf[id_col].iloc[i]),
                boundary=None if geom is None or geom.is_empty else geom,
                area=None if pd.isna(area) else float(area),
                demographic_value=None if pd.isna(value) else float(value),
                name="" if names is None or pd.isna(names.iloc[i]) else str(names.iloc[i]),
            )
        )
    return regions


def results_to_gdf(
    results: Sequence[ClassifiedRegion],
    regions: Sequence[Region],
    crs: str = "EPSG:4326",
) -> gpd.GeoDataFrame:
    """Attach region boundaries to classified results for writing/plotting."""
    boundaries: Dict[str, Any] = {}
    for region in regions:
        boundaries.setdefault(region.region_id, region.boundary)

    columns = ["region_id", "name", "count", "rate", "rate_class", "count_class", "bin", "color"]
    records = [r.to_dict() for r in results]
    return gpd.GeoDataFrame(
        pd.DataFrame(records, columns=columns),
        geometry=[boundaries.get(r.region_id) for r in results],
        crs=crs,
    )


def write_results_geojson(gdf: gpd.GeoDataFrame, out_path: str | pathlib.Path) -> None:
    _ensure_parent(out_path)
    gdf.to_file(out_path, driver="GeoJSON")


def _write_json(obj: Any, out_path: str | pathlib.Path) -> None:
    _ensure_parent(out_path)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2, default=_json_default)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_legend_json(legend: Sequence[LegendCell], out_path: str | pathlib.Path) -> None:
    """Write legend cells as a JSON array of objects in canonical order."""
    _write_json([cell.to_dict() for cell in legend], out_path)


def write_report_json(report: PipelineReport, out_path: str | pathlib.Path) -> None:
    _write_json(report.to_dict(), out_path)
