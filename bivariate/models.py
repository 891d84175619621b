"""Typed records passed between pipeline stages.

Only the fields the core needs are carried; anything else from the raw
tables (shape labels, free text, state codes) rides along in
``PointEvent.attributes`` or stays in the loading layer.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

M2_PER_KM2 = 1_000_000.0


@dataclass(frozen=True)
class PointEvent:
    id: Any
    latitude: Optional[float]
    longitude: Optional[float]
    timestamp: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_valid(self) -> bool:
        """True if both coordinates are present and finite.

        No range check: points may be in any CRS shared with the regions.
        """
        lat, lon = self.latitude, self.longitude
        if lat is None or lon is None:
            return False
        try:
            lat, lon = float(lat), float(lon)
        except (TypeError, ValueError):
            return False
        return math.isfinite(lat) and math.isfinite(lon)


@dataclass(frozen=True)
class Region:
    region_id: str
    boundary: Any
    area: Optional[float]
    demographic_value: Optional[float]
    name: str = ""


@dataclass(frozen=True)
class RegionAggregate:
    region_id: str
    name: str
    count: int
    rate: float


@dataclass(frozen=True)
class ClassifiedRegion:
    region_id: str
    name: str
    count: int
    rate: float
    rate_class: int
    count_class: int
    bin: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region_id": self.region_id,
            "name": self.name,
            "count": self.count,
            "rate": self.rate,
            "rate_class": self.rate_class,
            "count_class": self.count_class,
            "bin": self.bin,
            "color": self.color,
        }


@dataclass(frozen=True)
class LegendCell:
    bin: str
    color: str
    row: int
    col: int
    rate_class: int
    count_class: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bin": self.bin,
            "color": self.color,
            "row": self.row,
            "col": self.col,
            "rate_class": self.rate_class,
            "count_class": self.count_class,
        }


@dataclass(frozen=True)
class SkippedRegion:
    region_id: str
    reason: str
    detail: str = ""


@dataclass(frozen=True)
class JoinResult:
    """Per-region point counts plus the point-level bookkeeping.

    ``unmatched_points`` includes malformed points, so
    ``matched_points + unmatched_points == total_points`` holds over the
    regions passed to the join. ``run_pipeline`` joins only the regions that
    survive ``select_regions``, so there ``matched_points`` also equals the sum
    of output counts.
    """

    counts: Dict[str, int]
    total_points: int
    matched_points: int
    malformed_points: int

    @property
    def unmatched_points(self) -> int:
        return self.total_points - self.matched_points


@dataclass
class PipelineReport:
    total_points: int = 0
    matched_points: int = 0
    malformed_points: int = 0
    skipped_regions: List[SkippedRegion] = field(default_factory=list)
    duplicate_region_ids: List[str] = field(default_factory=list)
    degenerate_distributions: List[str] = field(default_factory=list)

    @property
    def unmatched_points(self) -> int:
        return self.total_points - self.matched_points

    @property
    def skipped_region_ids(self) -> List[str]:
        return [s.region_id for s in self.skipped_regions]

    def to_dict(self) -> Dict[str, Any]:
        """Render the report as a JSON-ready dict stamped with the run time."""
        return {
            "timestamp": datetime.now().isoformat(),
            "stage": "bivariate",
            "points": {
                "total": self.total_points,
                "matched": self.matched_points,
                "unmatched": self.unmatched_points,
                "malformed": self.malformed_points,
            },
            "skipped_regions": [
                {"region_id": s.region_id, "reason": s.reason, "detail": s.detail}
                for s in self.skipped_regions
            ],
            "duplicate_region_ids": list(self.duplicate_region_ids),
            "degenerate_distributions": list(self.degenerate_distributions),
        }


@dataclass(frozen=True)
class PipelineResult:
    results: Tuple[ClassifiedRegion, ...]
    legend: Tuple[LegendCell, ...]
    report: PipelineReport
