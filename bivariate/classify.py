"""Combination of rate and count tertiles into 3x3 bivariate classes.

Labels are ``"{rate_class}-{count_class}"``. The canonical order lays the
classes out as a 3x3 legend: one column per count class (low to high),
rows within a column running from the highest rate class to the lowest.
Palette colors and legend cells are both indexed by this order.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from bivariate.binning import N_CLASSES, is_degenerate, tertile_classes
from bivariate.errors import UnknownClassError
from bivariate.models import RegionAggregate

CLASS_INDICES = tuple(range(1, N_CLASSES + 1))

CANONICAL_CLASSES: Tuple[str, ...] = tuple(
    f"{rate_class}-{count_class}"
    for count_class in CLASS_INDICES
    for rate_class in reversed(CLASS_INDICES)
)


def _check_index(value, axis: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value not in CLASS_INDICES:
        raise UnknownClassError(f"{axis} class must be one of {CLASS_INDICES}, got {value!r}")
    return value


def bivariate_class(rate_class: int, count_class: int) -> str:
    """Combine a (rate_class, count_class) pair into its label.

    Raises:
        UnknownClassError: If either index is outside {1, 2, 3}.

    Example:
        >>> bivariate_class(3, 1)
        '3-1'
    """
    _check_index(rate_class, "rate")
    _check_index(count_class, "count")
    return f"{rate_class}-{count_class}"


def parse_class(label: str) -> Tuple[int, int]:
    """Split a label back into (rate_class, count_class).

    Raises:
        UnknownClassError: If the label is not one of the 9 canonical labels.
    """
    if label not in CANONICAL_CLASSES:
        raise UnknownClassError(f"Unknown bivariate class: {label!r}")
    rate_class, count_class = label.split("-")
    return int(rate_class), int(count_class)


def canonical_classes() -> List[str]:
    return list(CANONICAL_CLASSES)


def legend_position(label: str) -> Tuple[int, int]:
    """Return the (row, col) legend cell of a label.

    Row 0 holds the highest rate class, column 0 the lowest count class.
    """
    rate_class, count_class = parse_class(label)
    return N_CLASSES - rate_class, count_class - 1


def classify_aggregates(
    aggregates: Sequence[RegionAggregate],
) -> Tuple[List[Tuple[int, int, str]], List[str]]:
    """Bin counts and rates independently and label each aggregate.

    Args:
        aggregates: Region aggregates in output order.

    Returns:
        Tuple of (per-aggregate ``(rate_class, count_class, label)`` in input
        order, names of distributions with fewer than 3 distinct values).
    """
    if not aggregates:
        return [], []

    counts = [a.count for a in aggregates]
    rates = [a.rate for a in aggregates]

    degenerate = [
        name for name, values in (("count", counts), ("rate", rates))
        if is_degenerate(values)
    ]

    labelled = [
        (rate_class, count_class, bivariate_class(rate_class, count_class))
        for rate_class, count_class in zip(tertile_classes(rates), tertile_classes(counts))
    ]
    return labelled, degenerate
