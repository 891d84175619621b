"""Point-in-polygon join of point events onto regions.

Matches each valid point event to the region whose boundary covers it
(boundary points count as contained) and tallies per-region counts. The
join never reprojects: points and region boundaries must already share a
CRS (lon/lat for points built by ``bivariate.io``).
"""
from __future__ import annotations

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import Point
from shapely.strtree import STRtree

from bivariate.models import JoinResult, PointEvent, Region

_NO_MATCH = np.iinfo(np.int64).max


class RegionIndex:
    """STRtree over region boundaries with first-region-wins lookup.

    Regions without a boundary (or with an empty one) are left out of the
    index and can never receive points.

    Attributes:
        regions: Regions in input order.
        positions: Input positions of the indexed regions, ascending.
        tree: STRtree over the indexed boundaries, or None if none indexed.
    """

    def __init__(self, regions: Sequence[Region]):
        self.regions = list(regions)
        self.positions = np.array(
            [
                i for i, r in enumerate(self.regions)
                if r.boundary is not None and not r.boundary.is_empty
            ],
            dtype=np.int64,
        )
        self.tree: Optional[STRtree] = None
        if len(self.positions):
            self.tree = STRtree([self.regions[i].boundary for i in self.positions])

    def assign(self, points: Sequence[PointEvent]) -> np.ndarray:
        """Return the input position of the covering region per point.

        Args:
            points: Point events. Malformed events (see ``PointEvent.is_valid``)
                are never matched.

        Returns:
            Integer array of shape (len(points),): region position in the
            input sequence, or -1 if the point is malformed or falls outside
            every region. When several regions cover a point (shared edges or
            overlap), the one earliest in input order wins.
        """
        out = np.full(len(points), -1, dtype=np.int64)
        if self.tree is None:
            return out

        valid = np.array([i for i, p in enumerate(points) if p.is_valid], dtype=np.int64)
        if len(valid) == 0:
            return out

        geoms = [
            Point(float(points[i].longitude), float(points[i].latitude))
            for i in valid
        ]
        pt_ix, tree_ix = self.tree.query(geoms, predicate="covered_by")

        # Tree indices follow input order, so the minimum is the first region
        best = np.full(len(valid), _NO_MATCH, dtype=np.int64)
        np.minimum.at(best, pt_ix, tree_ix)
        hit = best != _NO_MATCH
        out[valid[hit]] = self.positions[best[hit]]
        return out


def assign_points_to_regions(
    points: Sequence[PointEvent],
    regions: Sequence[Region],
) -> np.ndarray:
    """Assign each point to a region position, -1 if none.

    Example:
        >>> idx = assign_points_to_regions(points, regions)
        >>> regions[idx[0]].region_id if idx[0] >= 0 else None
        '06037'
    """
    return RegionIndex(regions).assign(points)


def _shard_bounds(n: int, shards: int) -> List[Tuple[int, int]]:
    """Split range(n) into at most ``shards`` contiguous, non-empty slices."""
    shards = max(1, min(shards, n))
    edges = np.linspace(0, n, shards + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def join_points_to_regions(
    points: Sequence[PointEvent],
    regions: Sequence[Region],
    shards: int = 1,
) -> JoinResult:
    """Count point events per region.

    Args:
        points: Point events in the same CRS as the region boundaries.
        regions: Regions; boundaries are assumed non-overlapping.
        shards: Number of point shards to query concurrently. Per-shard
            counts are summed, so the result does not depend on this value.

    Returns:
        JoinResult with counts keyed by region_id (regions with no points
        are absent; the aggregator treats absence as zero), total, matched
        and malformed point counts.

    Algorithm:
        1. Build an STRtree over region boundaries
        2. Bulk-query valid points with the ``covered_by`` predicate
        3. Keep the earliest covering region per point
        4. Sum per-region counts across shards
    """
    points = list(points)
    index = RegionIndex(regions)
    malformed = sum(1 for p in points if not p.is_valid)

    def count_shard(bounds: Tuple[int, int]) -> Counter:
        lo, hi = bounds
        assigned = index.assign(points[lo:hi])
        counter: Counter = Counter()
        for pos in assigned[assigned >= 0]:
            counter[index.regions[pos].region_id] += 1
        return counter

    bounds = _shard_bounds(len(points), shards)
    if len(bounds) <= 1:
        partials = [count_shard(b) for b in bounds]
    else:
        with ThreadPoolExecutor(max_workers=len(bounds)) as pool:
            partials = list(pool.map(count_shard, bounds))

    counts: Counter = Counter()
    for partial in partials:
        counts.update(partial)

    return JoinResult(
        counts=dict(counts),
        total_points=len(points),
        matched_points=sum(counts.values()),
        malformed_points=malformed,
    )
