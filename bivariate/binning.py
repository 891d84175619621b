"""Tertile binning of a numeric distribution into classes 1..3.

Cut points are order statistics of the sorted values: the k-th cut is the
value at position ceil(k*n/3) - 1 (k = 1, 2). A value equal to a cut falls
in the lower class, so runs of tied values never straddle two classes.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

N_CLASSES = 3


def _as_array(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D sequence of values, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError("Cannot bin non-finite values")
    return arr


def tertile_cuts(values: Sequence[float]) -> Tuple[float, float]:
    """Return the two upper-inclusive cut values for tertile classes.

    Args:
        values: Non-empty sequence of finite numbers.

    Returns:
        (cut1, cut2) with cut1 <= cut2.

    Raises:
        ValueError: If values is empty or contains non-finite numbers.

    Example:
        >>> tertile_cuts([10, 50, 90])
        (10.0, 50.0)
    """
    arr = _as_array(values)
    n = len(arr)
    if n == 0:
        raise ValueError("Cannot compute tertile cuts of an empty sequence")
    ordered = np.sort(arr, kind="stable")
    # ceil(k*n/3) - 1 in integer arithmetic
    cuts = [ordered[(k * n + N_CLASSES - 1) // N_CLASSES - 1] for k in (1, 2)]
    return float(cuts[0]), float(cuts[1])


def tertile_classes(values: Sequence[float]) -> List[int]:
    """Assign each value a class in {1, 2, 3}, preserving input order.

    1 is the lowest tertile and 3 the highest. Ties with a cut go to the
    lower class. With fewer than 3 distinct values the classes are uneven
    (all-equal input is entirely class 1) but every value still gets one.

    Example:
        >>> tertile_classes([90, 10, 50])
        [3, 1, 2]
        >>> tertile_classes([5, 5, 5, 5])
        [1, 1, 1, 1]
    """
    arr = _as_array(values)
    if len(arr) == 0:
        return []
    cuts = np.array(tertile_cuts(arr))
    classes = np.searchsorted(cuts, arr, side="left") + 1
    return [int(c) for c in classes]


def is_degenerate(values: Sequence[float]) -> bool:
    """True if the distribution has fewer than 3 distinct values."""
    return len(np.unique(np.asarray(values, dtype=float))) < N_CLASSES
