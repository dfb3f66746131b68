from __future__ import annotations

from typing import Optional

from .distance import DistanceFn, check_length, fold, get_strategy


def similarity(a: str, b: str, distance_fn: Optional[DistanceFn] = None) -> float:
    """
    Edit distance normalised by the longer operand, on a 0-100 scale.

    An empty operand carries no information, so the score is 0.0 even when
    both sides are empty.  No rounding is applied.
    """
    check_length(a, b)
    if not a or not b:
        return 0.0

    if distance_fn is None:
        distance_fn = get_strategy()

    # lengths of the folded text, so a case mapping that changes length
    # cannot push the score outside [0, 100]
    longest = max(len(fold(a)), len(fold(b)))
    return 100.0 * (longest - distance_fn(a, b)) / longest
