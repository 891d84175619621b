"""Bivariate choropleth classification of point events over regions.

Joins geolocated point events to polygon regions, derives per-region event
counts and area-normalized demographic rates, bins both into tertiles and
combines them into one of 9 bivariate classes with a fixed color each.
"""

from bivariate.errors import (
    BivariateMapError,
    InvalidGeometryError,
    InvalidDemographicValueError,
    UnknownClassError,
    SkippedRegionWarning,
    DegenerateDistributionWarning,
    MalformedRecordWarning,
)
from bivariate.models import (
    PointEvent,
    Region,
    RegionAggregate,
    ClassifiedRegion,
    LegendCell,
    SkippedRegion,
    JoinResult,
    PipelineReport,
    PipelineResult,
    M2_PER_KM2,
)
from bivariate.join import RegionIndex, assign_points_to_regions, join_points_to_regions
from bivariate.aggregate import aggregate_regions, select_regions, validate_region, region_rate
from bivariate.binning import tertile_cuts, tertile_classes, is_degenerate
from bivariate.classify import (
    CANONICAL_CLASSES,
    bivariate_class,
    parse_class,
    canonical_classes,
    legend_position,
    classify_aggregates,
)
from bivariate.palette import PALETTES, DEFAULT_PALETTE, PaletteMapper, color_of, build_legend
from bivariate.pipeline import run_pipeline

__all__ = [
    "BivariateMapError",
    "InvalidGeometryError",
    "InvalidDemographicValueError",
    "UnknownClassError",
    "SkippedRegionWarning",
    "DegenerateDistributionWarning",
    "MalformedRecordWarning",
    "PointEvent",
    "Region",
    "RegionAggregate",
    "ClassifiedRegion",
    "LegendCell",
    "SkippedRegion",
    "JoinResult",
    "PipelineReport",
    "PipelineResult",
    "M2_PER_KM2",
    "RegionIndex",
    "assign_points_to_regions",
    "join_points_to_regions",
    "aggregate_regions",
    "select_regions",
    "validate_region",
    "region_rate",
    "tertile_cuts",
    "tertile_classes",
    "is_degenerate",
    "CANONICAL_CLASSES",
    "bivariate_class",
    "parse_class",
    "canonical_classes",
    "legend_position",
    "classify_aggregates",
    "PALETTES",
    "DEFAULT_PALETTE",
    "PaletteMapper",
    "color_of",
    "build_legend",
    "run_pipeline",
]
