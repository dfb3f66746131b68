# editrank/ranking.py
from __future__ import annotations

import heapq
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from loguru import logger

from . import config
from .distance import DistanceFn, get_strategy
from .similarity import similarity


# ---------------------------------------------------------------------------
# Public structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoredCandidate:
    score: float
    text: str


@dataclass(frozen=True)
class RankingResult:
    """Top-K candidates, best first, plus the time spent scoring them."""

    items: List[ScoredCandidate] = field(default_factory=list)
    elapsed: float = 0.0  # seconds

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def texts(self) -> List[str]:
        return [item.text for item in self.items]

    @property
    def hints(self) -> List[str]:
        return [format_hint(item) for item in self.items]


def format_hint(item: ScoredCandidate) -> str:
    """Display string for one result, e.g. ``'kitten (100.0%)'``."""
    return f"{item.text} ({item.score:.1f}%)"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def _validate_k(k: int) -> int:
    if isinstance(k, bool) or not isinstance(k, int) or k < 1:
        raise ValueError(f"k must be a positive integer, got {k!r}")
    return k


def score_candidates(
    query: str,
    candidates: Sequence[str],
    distance_fn: Optional[DistanceFn] = None,
) -> List[ScoredCandidate]:
    """Score every candidate against ``query``, in dataset order."""
    if distance_fn is None:
        distance_fn = get_strategy()
    return [ScoredCandidate(similarity(query, c, distance_fn), c) for c in candidates]


def select_top_k(scored: Sequence[ScoredCandidate], k: int) -> List[ScoredCandidate]:
    """
    Highest scores first; equal scores keep their dataset order.

    ``heapq.nlargest`` with a key is equivalent to
    ``sorted(scored, key=..., reverse=True)[:k]``, which is stable.
    """
    return heapq.nlargest(_validate_k(k), scored, key=lambda sc: sc.score)


def rank(
    query: str,
    candidates: Sequence[str],
    k: int = config.DEFAULT_TOP_K,
    distance_fn: Optional[DistanceFn] = None,
) -> RankingResult:
    """
    Rank ``candidates`` by similarity to ``query`` and keep the best ``k``.

    An empty dataset gives an empty result.  An empty query scores every
    candidate 0.0, so the first ``k`` candidates come back in dataset order.
    """
    _validate_k(k)
    start = time.perf_counter()
    scored = score_candidates(query, candidates, distance_fn)
    top = select_top_k(scored, k)
    elapsed = time.perf_counter() - start
    logger.debug(
        "Ranked {} candidates for {!r} in {:.4f}s (k={})",
        len(scored), query, elapsed, k,
    )
    return RankingResult(items=top, elapsed=elapsed)


class Ranker:
    """
    A named ranking strategy.

    Wraps one distance function so callers (scheduler, benchmark CLI) can
    swap kernels without touching the pipeline.
    """

    def __init__(
        self,
        distance_fn: Optional[DistanceFn] = None,
        k: int = config.DEFAULT_TOP_K,
        description: Optional[str] = None,
    ):
        self.distance_fn = distance_fn or get_strategy()
        self.k = _validate_k(k)
        self.description = description or getattr(
            self.distance_fn, "__name__", "distance"
        )

    @classmethod
    def from_strategy(cls, name: Optional[str] = None, k: int = config.DEFAULT_TOP_K) -> "Ranker":
        key = name or config.DEFAULT_STRATEGY
        return cls(get_strategy(key), k=k, description=key)

    def process(self, query: str, candidates: Sequence[str]) -> RankingResult:
        return rank(query, candidates, self.k, self.distance_fn)

    def __repr__(self) -> str:
        return f"Ranker({self.description!r}, k={self.k})"
