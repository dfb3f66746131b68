from __future__ import annotations

"""
Edit distance kernel.

Two interchangeable strategies compute the same Levenshtein distance
(insert = delete = substitute = 1, match = 0):

* full_table_distance(a, b) -> int
    Classic (n+1) x (m+1) dynamic-programming table, kept whole in a numpy
    matrix.

* rolling_distance(a, b) -> int
    Two rolling rows sized by the shorter operand, O(min(n, m)) memory.

Both fold case before comparing characters.  Any callable with the
``DistanceFn`` shape can stand in for them (see ``STRATEGIES``).
"""

from typing import Callable, Dict, Optional

import numpy as np

from . import config
from .errors import InputTooLarge

DistanceFn = Callable[[str, str], int]


def fold(text: str) -> str:
    """Case-fold without any locale-specific collation."""
    return text.lower()


def check_length(*texts: str) -> None:
    """Raise ``InputTooLarge`` if any operand is longer than ``config.MAX_INPUT_LENGTH``."""
    limit = config.MAX_INPUT_LENGTH
    longest = max((len(t) for t in texts), default=0)
    if longest > limit:
        raise InputTooLarge(longest, limit)


def full_table_distance(a: str, b: str) -> int:
    check_length(a, b)
    s, t = fold(a), fold(b)
    n, m = len(s), len(t)
    if n == 0:
        return m
    if m == 0:
        return n

    d = np.zeros((n + 1, m + 1), dtype=np.int64)
    d[:, 0] = np.arange(n + 1)
    d[0, :] = np.arange(m + 1)

    t_codes = np.fromiter((ord(c) for c in t), dtype=np.int64, count=m)
    offsets = np.arange(m + 1)

    for i in range(1, n + 1):
        cost = (t_codes != ord(s[i - 1])).astype(np.int64)
        # deletion / substitution candidates for every column of row i
        best = np.empty(m + 1, dtype=np.int64)
        best[0] = i
        best[1:] = np.minimum(d[i - 1, 1:] + 1, d[i - 1, :-1] + cost)
        # insertions chain left to right: d[i][j] = min_l(best[l] + j - l)
        d[i] = np.minimum.accumulate(best - offsets) + offsets

    return int(d[n, m])


def rolling_distance(a: str, b: str) -> int:
    check_length(a, b)
    s, t = fold(a), fold(b)
    if s == t:
        return 0
    # keep the rows as short as the shorter operand
    if len(s) < len(t):
        s, t = t, s
    if not t:
        return len(s)

    prev = list(range(len(t) + 1))
    for i, cs in enumerate(s, start=1):
        cur = [i]
        for j, ct in enumerate(t, start=1):
            cost = 0 if cs == ct else 1
            cur.append(min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + cost))
        prev = cur
    return prev[-1]


STRATEGIES: Dict[str, DistanceFn] = {
    config.STRATEGY_FULL_TABLE: full_table_distance,
    config.STRATEGY_ROLLING: rolling_distance,
}


def get_strategy(name: Optional[str] = None) -> DistanceFn:
    key = (name or config.DEFAULT_STRATEGY).strip().lower()
    try:
        return STRATEGIES[key]
    except KeyError:
        raise ValueError(
            f"Unknown distance strategy {name!r}; expected one of {sorted(STRATEGIES)}"
        ) from None


def distance(a: str, b: str, strategy: Optional[str] = None) -> int:
    """
    Minimum number of single-character edits turning ``a`` into ``b``.

    Empty operands are valid: the distance is then the other's length.
    Raises ``InputTooLarge`` when an operand exceeds ``config.MAX_INPUT_LENGTH``.
    """
    return get_strategy(strategy)(a, b)
