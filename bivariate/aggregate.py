"""Per-region counts and area-normalized demographic rates."""
from __future__ import annotations

import math
import warnings
from typing import List, Sequence, Tuple

from bivariate.errors import (
    InvalidDemographicValueError,
    InvalidGeometryError,
    SkippedRegionWarning,
)
from bivariate.models import (
    M2_PER_KM2,
    JoinResult,
    Region,
    RegionAggregate,
    SkippedRegion,
)


def _finite(value) -> bool:
    try:
        return value is not None and math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def validate_region(region: Region) -> None:
    """Raise if a region cannot take part in aggregation.

    Raises:
        InvalidGeometryError: No boundary, empty boundary, or a missing,
            non-finite or non-positive area.
        InvalidDemographicValueError: Missing, non-finite or negative
            demographic value.
    """
    if region.boundary is None or region.boundary.is_empty:
        raise InvalidGeometryError(f"region {region.region_id} has no boundary")
    if not _finite(region.area) or float(region.area) <= 0:
        raise InvalidGeometryError(
            f"region {region.region_id} has non-positive area: {region.area}"
        )
    if not _finite(region.demographic_value) or float(region.demographic_value) < 0:
        raise InvalidDemographicValueError(
            f"region {region.region_id} has invalid demographic value: "
            f"{region.demographic_value}"
        )


def region_rate(region: Region) -> float:
    """Demographic value per km² (region area is stored in m²)."""
    return float(region.demographic_value) / (float(region.area) / M2_PER_KM2)


def select_regions(
    regions: Sequence[Region],
) -> Tuple[List[Region], List[SkippedRegion], List[str]]:
    """Drop duplicate ids and invalid regions before the join.

    Duplicate region ids keep their first occurrence. Regions failing
    ``validate_region`` are excluded, reported, and warned about with
    ``SkippedRegionWarning``; they never abort the run.

    Returns:
        Tuple of (usable regions in input order, skipped regions, duplicate ids).
    """
    usable: List[Region] = []
    skipped: List[SkippedRegion] = []
    duplicates: List[str] = []
    seen = set()

    for region in regions:
        if region.region_id in seen:
            duplicates.append(region.region_id)
            continue
        seen.add(region.region_id)

        try:
            validate_region(region)
        except (InvalidGeometryError, InvalidDemographicValueError) as e:
            skipped.append(SkippedRegion(region.region_id, type(e).__name__, str(e)))
            warnings.warn(str(e), SkippedRegionWarning, stacklevel=2)
            continue
        usable.append(region)

    if duplicates:
        warnings.warn(
            f"duplicate region ids dropped: {sorted(set(duplicates))}",
            SkippedRegionWarning,
            stacklevel=2,
        )

    return usable, skipped, duplicates


def aggregate_regions(
    join_result: JoinResult,
    regions: Sequence[Region],
) -> Tuple[List[RegionAggregate], List[SkippedRegion], List[str]]:
    """Build one aggregate per usable region.

    Regions are filtered through ``select_regions`` first. Counts are only
    meaningful when ``join_result`` was computed over the usable regions;
    ``run_pipeline`` selects before joining for that reason.

    Args:
        join_result: Output of ``join_points_to_regions``.
        regions: Regions in input order.

    Returns:
        Tuple of (aggregates in input order, skipped regions, duplicate ids).
    """
    usable, skipped, duplicates = select_regions(regions)
    aggregates = [
        RegionAggregate(
            region_id=region.region_id,
            name=region.name,
            count=int(join_result.counts.get(region.region_id, 0)),
            rate=region_rate(region),
        )
        for region in usable
    ]
    return aggregates, skipped, duplicates
