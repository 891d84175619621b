"""Static matplotlib rendering of a classified bivariate map and legend.

Consumes the output of ``run_pipeline`` (joined to boundaries with
``bivariate.io.results_to_gdf``); never called by the pipeline itself.
"""
from __future__ import annotations

import os
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import geopandas as gpd  # noqa: E402

from bivariate.binning import N_CLASSES  # noqa: E402
from bivariate.models import LegendCell  # noqa: E402


def draw_legend(
    ax,
    legend: Sequence[LegendCell],
    x_label: str = "Point count",
    y_label: str = "Rate per km²",
) -> None:
    """Draw the 3x3 legend grid: columns = count class, rows = rate class.

    Row 0 of the legend (highest rate) is drawn at the top.
    """
    for cell in legend:
        ax.add_patch(
            plt.Rectangle(
                (cell.col, N_CLASSES - 1 - cell.row), 1.0, 1.0,
                facecolor=cell.color, edgecolor="white", linewidth=0.5,
            )
        )
    ax.set_xlim(0, N_CLASSES)
    ax.set_ylim(0, N_CLASSES)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])
    for side in ("top", "right", "bottom", "left"):
        ax.spines[side].set_visible(False)
    ax.set_xlabel(f"{x_label} →", fontsize=9)
    ax.set_ylabel(f"{y_label} →", fontsize=9)


def plot_bivariate_map(
    gdf: gpd.GeoDataFrame,
    legend: Sequence[LegendCell],
    out_path: str,
    points: Optional[gpd.GeoDataFrame] = None,
    title: Optional[str] = None,
    dpi: int = 200,
) -> str:
    """Render classified regions filled with their ``color`` plus a legend.

    Args:
        gdf: Classified regions with ``color`` column and polygon geometry.
        legend: Legend cells from the pipeline result.
        out_path: PNG output path (parent directory is created).
        points: Optional point events to overlay.
        title: Optional figure title.
        dpi: Output resolution.

    Returns:
        The output path.
    """
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    fig = plt.figure(figsize=(12, 9))
    ax_map = fig.add_axes([0.02, 0.05, 0.72, 0.88])
    ax_leg = fig.add_axes([0.78, 0.12, 0.18, 0.24])

    if len(gdf):
        gdf.plot(ax=ax_map, color=gdf["color"].tolist(), edgecolor="white", linewidth=0.3)
    if points is not None and len(points):
        points.plot(ax=ax_map, color="black", markersize=1, alpha=0.3)
    ax_map.set_axis_off()
    if title:
        ax_map.set_title(title, fontsize=14, fontweight="bold")

    draw_legend(ax_leg, legend)

    plt.savefig(out_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return out_path
