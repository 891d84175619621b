"""Unit tests for bivariate.aggregate module."""

import math

import pytest
from shapely.geometry import Polygon, box

from bivariate.aggregate import aggregate_regions, region_rate, select_regions, validate_region
from bivariate.errors import (
    InvalidDemographicValueError,
    InvalidGeometryError,
    SkippedRegionWarning,
)
from bivariate.models import JoinResult, Region


def _join(counts, total=None):
    matched = sum(counts.values())
    return JoinResult(counts=counts, total_points=total or matched,
                      matched_points=matched, malformed_points=0)


class TestValidateRegion:
    """Test suite for validate_region function.

    Tests geometry and demographic value checks that decide whether a
    region takes part in aggregation.
    """

    def test_valid_region(self):
        """Test a well-formed region passes."""
        validate_region(Region("A", box(0, 0, 1, 1), 1.0, 0.0))

    @pytest.mark.parametrize("area", [0, 0.0, -5.0, None, math.nan, math.inf])
    def test_invalid_area(self, area):
        """Test missing, zero, negative and non-finite areas."""
        with pytest.raises(InvalidGeometryError):
            validate_region(Region("A", box(0, 0, 1, 1), area, 1.0))

    def test_missing_boundary(self):
        """Test region without boundary."""
        with pytest.raises(InvalidGeometryError):
            validate_region(Region("A", None, 1.0, 1.0))

    def test_empty_boundary(self):
        """Test region with empty boundary."""
        with pytest.raises(InvalidGeometryError):
            validate_region(Region("A", Polygon(), 1.0, 1.0))

    @pytest.mark.parametrize("value", [None, -1.0, math.nan])
    def test_invalid_demographic_value(self, value):
        """Test missing, negative and NaN demographic values."""
        with pytest.raises(InvalidDemographicValueError):
            validate_region(Region("A", box(0, 0, 1, 1), 1.0, value))


class TestRegionRate:
    """Test suite for region_rate function."""

    def test_rate_per_km2(self):
        """Test area in m² is converted to km²."""
        region = Region("A", box(0, 0, 1, 1), 4_000_000.0, 100.0)

        assert region_rate(region) == pytest.approx(25.0)

    def test_rate_zero_value(self):
        """Test zero demographic value gives zero rate."""
        assert region_rate(Region("A", box(0, 0, 1, 1), 1_000_000.0, 0.0)) == 0.0


class TestAggregateRegions:
    """Test suite for aggregate_regions function.

    Tests counts, rates, exclusion of invalid regions, duplicate handling
    and determinism.
    """

    def test_aggregate_counts_and_rates(self, strip_regions):
        """Test counts come from the join and rates from value / km²."""
        aggs, skipped, dups = aggregate_regions(_join({"A": 10, "B": 50, "C": 90}), strip_regions)

        assert [a.count for a in aggs] == [10, 50, 90]
        assert [a.rate for a in aggs] == pytest.approx([1.0, 5.0, 9.0])
        assert [a.name for a in aggs] == ["Alpha", "Bravo", "Charlie"]
        assert skipped == []
        assert dups == []

    def test_aggregate_zero_count_is_kept(self, strip_regions):
        """Test regions without points get count 0."""
        aggs, _, _ = aggregate_regions(_join({"B": 3}), strip_regions)

        assert [a.count for a in aggs] == [0, 3, 0]

    def test_aggregate_zero_area_skipped(self, strip_regions):
        """Test zero-area region is excluded and reported."""
        regions = strip_regions + [Region("Z", box(5, 5, 6, 6), 0.0, 10.0, "Zero")]
        with pytest.warns(SkippedRegionWarning):
            aggs, skipped, _ = aggregate_regions(_join({}), regions)

        assert "Z" not in [a.region_id for a in aggs]
        assert len(skipped) == 1
        assert skipped[0].region_id == "Z"
        assert skipped[0].reason == "InvalidGeometryError"

    def test_aggregate_bad_value_skipped(self, strip_regions):
        """Test region with missing demographic value is skipped."""
        regions = strip_regions + [Region("N", box(5, 5, 6, 6), 1.0, None)]
        with pytest.warns(SkippedRegionWarning):
            _, skipped, _ = aggregate_regions(_join({}), regions)

        assert [(s.region_id, s.reason) for s in skipped] == [("N", "InvalidDemographicValueError")]

    def test_aggregate_duplicates_first_wins(self, strip_regions):
        """Test duplicate region ids keep the first occurrence."""
        dup = Region("A", box(0, 0, 1, 1), 1_000_000.0, 999.0, "Alpha again")
        with pytest.warns(SkippedRegionWarning):
            aggs, _, dups = aggregate_regions(_join({"A": 1}), strip_regions + [dup])

        assert [a.region_id for a in aggs] == ["A", "B", "C"]
        assert aggs[0].name == "Alpha"
        assert dups == ["A"]

    def test_aggregate_counts_non_negative(self, strip_regions):
        """Test every aggregate has a non-negative integer count."""
        aggs, _, _ = aggregate_regions(_join({"A": 2}), strip_regions)

        assert all(isinstance(a.count, int) and a.count >= 0 for a in aggs)

    def test_aggregate_deterministic(self, strip_regions):
        """Test identical inputs give identical aggregates."""
        join = _join({"C": 4, "A": 1, "B": 2})
        first = aggregate_regions(join, strip_regions)
        second = aggregate_regions(join, strip_regions)

        assert first == second

    def test_aggregate_empty(self):
        """Test no regions produce no aggregates."""
        assert aggregate_regions(_join({}), []) == ([], [], [])


class TestSelectRegions:
    """Test suite for select_regions function.

    Tests the filtering that runs before the join: duplicates and invalid
    regions are dropped and reported, the rest keep their input order.
    """

    def test_select_all_valid(self, strip_regions):
        """Test valid unique regions pass through unchanged."""
        usable, skipped, dups = select_regions(strip_regions)

        assert usable == list(strip_regions)
        assert skipped == []
        assert dups == []

    def test_select_drops_invalid_and_duplicates(self, strip_regions):
        """Test invalid regions and later duplicates are removed."""
        regions = [
            Region("Z", box(0, 0, 1, 1), 0.0, 10.0, "Zero"),
            *strip_regions,
            Region("B", box(0, 0, 3, 1), 1_000_000.0, 5.0, "Beta again"),
        ]
        with pytest.warns(SkippedRegionWarning):
            usable, skipped, dups = select_regions(regions)

        assert [r.region_id for r in usable] == ["A", "B", "C"]
        assert usable[1].name != "Beta again"
        assert [s.region_id for s in skipped] == ["Z"]
        assert dups == ["B"]
