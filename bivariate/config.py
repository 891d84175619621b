"""Configuration management for the bivariate map pipeline.

Provides default input/output paths, column names and classification
settings, and a loader that overlays a user JSON file on the defaults.
"""
from __future__ import annotations

import copy
import json
import pathlib

_DEFAULT = {
    "paths": {
        "points": "data/events.csv.gz",
        "regions": "data/geo/regions.geojson",
        "out_dir": "bivariate_out",
    },
    "columns": {
        "point_id": "id",
        "timestamp": "datetime",
        "latitude": "latitude",
        "longitude": "longitude",
        "region_id": "GEOID",
        "region_name": "NAME",
        "demographic": "estimate",
        "area": None,
    },
    "geo": {
        "crs": "EPSG:4326",
        "area_crs": "EPSG:6933",
    },
    "classify": {
        "palette": "DkBlue",
        "shards": 1,
    },
}


def load_config(path: str | None = "bivariate_config.json") -> dict:
    """Load pipeline configuration from JSON file.

    Loads user configuration file and merges with default configuration.
    Dict sections are updated key by key; other values replace defaults.

    Args:
        path: Path to configuration JSON file. If None or file doesn't exist,
            returns default configuration.

    Returns:
        dict: Merged configuration dictionary (a fresh copy every call).

    Raises:
        json.JSONDecodeError: If the file exists but is not valid JSON.
    """
    merged = copy.deepcopy(_DEFAULT)
    p = pathlib.Path(path) if path else None
    if p and p.exists():
        with p.open("r", encoding="utf-8") as f:
            user = json.load(f)
        for k, v in user.items():
            if isinstance(v, dict) and isinstance(merged.get(k), dict):
                merged[k].update(v)
            else:
                merged[k] = v
    return merged
