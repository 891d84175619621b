#!/usr/bin/env python3
"""Build a bivariate choropleth dataset from point events and regions.

Classifies each region by point-event count and demographic rate per km²,
and writes the classified regions (GeoJSON), the 3x3 legend (JSON) and a
run report (JSON), optionally with a PNG map.

Usage:
    # Run with defaults from bivariate_config.json (or built-in defaults)
    python run_bivariate_map.py

    # Or with custom arguments
    python run_bivariate_map.py --points data/events.csv.gz \
        --regions data/geo/states.geojson --palette GrPink --plot
"""

import argparse
import os
import sys
import warnings

from bivariate import run_pipeline
from bivariate.config import load_config
from bivariate.io import (
    load_points_df,
    load_regions_gdf,
    points_from_df,
    points_to_gdf,
    regions_from_gdf,
    results_to_gdf,
    write_legend_json,
    write_report_json,
    write_results_geojson,
)


def main(argv=None) -> int:
    """Load inputs, run the pipeline and write outputs.

    Returns:
        Process exit status (0 on success, 1 if inputs cannot be loaded).
    """
    parser = argparse.ArgumentParser(
        description="Classify regions by point density and demographic rate"
    )
    parser.add_argument("--config", default="bivariate_config.json",
                        help="Path to JSON config (default: bivariate_config.json)")
    parser.add_argument("--points", default=None, help="Point events file (CSV/JSON/JSONL)")
    parser.add_argument("--regions", default=None, help="Region polygons file (GeoJSON, GPKG, SHP)")
    parser.add_argument("--out", default=None, help="Output directory")
    parser.add_argument("--palette", default=None, help="Palette name (DkBlue, GrPink, DkViolet)")
    parser.add_argument("--shards", type=int, default=None,
                        help="Number of concurrent point shards for the join")
    parser.add_argument("--plot", action="store_true", help="Also render a PNG map")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    cols = cfg["columns"]
    points_path = args.points or cfg["paths"]["points"]
    regions_path = args.regions or cfg["paths"]["regions"]
    out_dir = args.out or cfg["paths"]["out_dir"]
    palette = args.palette or cfg["classify"]["palette"]
    shards = args.shards or cfg["classify"]["shards"]

    print(f"[INFO] Loading points from {points_path}...")
    try:
        df = load_points_df(points_path, lat_col=cols["latitude"], lon_col=cols["longitude"])
        points = points_from_df(
            df,
            id_col=cols["point_id"] if cols["point_id"] in df.columns else None,
            lat_col=cols["latitude"],
            lon_col=cols["longitude"],
            timestamp_col=cols["timestamp"] if cols["timestamp"] in df.columns else None,
        )
        print(f"[INFO] Loaded {len(points)} points")
        if df.attrs.get("skipped_lines"):
            print(f"[WARN] Skipped {df.attrs['skipped_lines']} unparseable lines in {points_path}")

        print(f"[INFO] Loading regions from {regions_path}...")
        regions_gdf = load_regions_gdf(regions_path)
        regions = regions_from_gdf(
            regions_gdf,
            id_col=cols["region_id"],
            name_col=cols["region_name"],
            value_col=cols["demographic"],
            area_col=cols["area"],
            crs=cfg["geo"]["crs"],
            area_crs=cfg["geo"]["area_crs"],
        )
        print(f"[INFO] Loaded {len(regions)} regions")
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] Failed to load data: {e}")
        return 1

    print(f"[INFO] Classifying with palette={palette}, shards={shards}...")
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        result = run_pipeline(points, regions, palette=palette, shards=shards)

    report = result.report
    print(f"[INFO] Points: {report.matched_points} matched, {report.unmatched_points} unmatched "
          f"({report.malformed_points} malformed)")
    for skipped in report.skipped_regions:
        print(f"[WARN] Skipped region {skipped.region_id}: {skipped.reason} ({skipped.detail})")
    if report.duplicate_region_ids:
        print(f"[WARN] Dropped duplicate region ids: {sorted(set(report.duplicate_region_ids))}")
    for name in report.degenerate_distributions:
        print(f"[WARN] {name} distribution has fewer than 3 distinct values")

    os.makedirs(out_dir, exist_ok=True)
    gdf = results_to_gdf(result.results, regions, crs=cfg["geo"]["crs"])
    geojson_path = os.path.join(out_dir, "regions_bivariate.geojson")
    legend_path = os.path.join(out_dir, "legend.json")
    report_path = os.path.join(out_dir, "report.json")
    write_results_geojson(gdf, geojson_path)
    write_legend_json(result.legend, legend_path)
    write_report_json(report, report_path)
    print(f"[OK] Wrote {len(result.results)} classified regions to {geojson_path}")

    if args.plot:
        from bivariate.render import plot_bivariate_map

        png_path = os.path.join(out_dir, "bivariate_map.png")
        plot_bivariate_map(gdf, result.legend, png_path,
                           points=points_to_gdf(points, crs=cfg["geo"]["crs"]))
        print(f"[OK] Rendered map to {png_path}")

    print("[DONE] Bivariate classification complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
