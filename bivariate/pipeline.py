"""End-to-end bivariate classification of regions.

Chains join -> aggregate -> tertile binning -> bivariate labels -> colors.
Per-region defects are excluded before the join and reported in
``PipelineReport``; a class outside the 3x3 enumeration raises
``UnknownClassError`` and stops the run.
"""
from __future__ import annotations

import warnings
from typing import Sequence

from bivariate.aggregate import aggregate_regions, select_regions
from bivariate.classify import classify_aggregates
from bivariate.errors import DegenerateDistributionWarning
from bivariate.join import join_points_to_regions
from bivariate.models import (
    ClassifiedRegion,
    PipelineReport,
    PipelineResult,
    PointEvent,
    Region,
)
from bivariate.palette import DEFAULT_PALETTE, PaletteMapper


def run_pipeline(
    points: Sequence[PointEvent],
    regions: Sequence[Region],
    palette: str = DEFAULT_PALETTE,
    shards: int = 1,
) -> PipelineResult:
    """Classify regions by point count and demographic rate.

    Args:
        points: Point events, same CRS as region boundaries.
        regions: Regions with boundary, area (m²) and demographic value.
        palette: Palette name for colors (default: "DkBlue").
        shards: Number of concurrent point shards for the join.

    Returns:
        PipelineResult with one ClassifiedRegion per usable region (input
        order), the 9-cell legend in canonical order, and the report.

    Raises:
        UnknownClassError: If binning or classification produced a class
            outside the 3x3 enumeration.
        ValueError: If the palette name is unknown.

    Example:
        >>> out = run_pipeline(points, regions)
        >>> out.results[0].bin in {c.bin for c in out.legend}
        True
    """
    mapper = PaletteMapper(palette)

    # Only usable regions take part in the join, so every matched point
    # lands in an output row.
    usable, skipped, duplicates = select_regions(regions)
    join_result = join_points_to_regions(points, usable, shards=shards)
    aggregates, _, _ = aggregate_regions(join_result, usable)
    labelled, degenerate = classify_aggregates(aggregates)

    for name in degenerate:
        warnings.warn(
            f"{name} distribution has fewer than 3 distinct values; "
            f"tertile classes will be uneven",
            DegenerateDistributionWarning,
            stacklevel=2,
        )

    results = tuple(
        ClassifiedRegion(
            region_id=agg.region_id,
            name=agg.name,
            count=agg.count,
            rate=agg.rate,
            rate_class=rate_class,
            count_class=count_class,
            bin=label,
            color=mapper.color_of(label),
        )
        for agg, (rate_class, count_class, label) in zip(aggregates, labelled)
    )

    report = PipelineReport(
        total_points=join_result.total_points,
        matched_points=join_result.matched_points,
        malformed_points=join_result.malformed_points,
        skipped_regions=skipped,
        duplicate_region_ids=duplicates,
        degenerate_distributions=degenerate,
    )
    return PipelineResult(results=results, legend=tuple(mapper.legend()), report=report)
