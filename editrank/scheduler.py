from __future__ import annotations

"""
Last-query-wins scheduling of ranking work.

Every ``submit`` starts an independent unit of work on a thread pool and
bumps a generation counter.  When a unit finishes, its outcome reaches the
sink only if no newer query was submitted in the meantime.  Superseded units
are not interrupted; they run to completion and their outcome is dropped.

Delivery goes through ``dispatch(fn, outcome)`` so the sink can live on any
single execution context (an asyncio loop via ``loop.call_soon_threadsafe``,
a UI toolkit's "invoke later", ...).  The generation is checked on the worker
before dispatching and again on the consumer side right before ``deliver``.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from loguru import logger

from . import config
from .errors import ComputationFailed, InputTooLarge
from .ranking import Ranker, RankingResult

ERROR_INPUT_TOO_LARGE = "input_too_large"
ERROR_COMPUTATION_FAILED = "computation_failed"

Deliver = Callable[["QueryOutcome"], None]
Dispatch = Callable[..., object]


@dataclass(frozen=True)
class QueryOutcome:
    """Result of one submission: a ranking, or a failure description."""

    query: str
    generation: int
    result: Optional[RankingResult] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    elapsed: float = 0.0  # seconds

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, query: str, generation: int, result: RankingResult) -> "QueryOutcome":
        return cls(query=query, generation=generation, result=result, elapsed=result.elapsed)

    @classmethod
    def failure(
        cls, query: str, generation: int, error: Exception, kind: str, elapsed: float
    ) -> "QueryOutcome":
        return cls(
            query=query,
            generation=generation,
            error=str(error),
            error_kind=kind,
            elapsed=elapsed,
        )


class QueryHandle:
    """Returned by ``QueryScheduler.submit``; lets the caller inspect one unit."""

    def __init__(self, scheduler: "QueryScheduler", generation: int, query: str, future: Future):
        self._scheduler = scheduler
        self.generation = generation
        self.query = query
        self.future = future

    def is_current(self) -> bool:
        return self._scheduler.latest_generation == self.generation

    def done(self) -> bool:
        return self.future.done()

    def wait(self, timeout: Optional[float] = None) -> QueryOutcome:
        """Block until the unit finished; returns its outcome even if it was superseded."""
        return self.future.result(timeout)

    def __repr__(self) -> str:
        return f"QueryHandle(generation={self.generation}, query={self.query!r})"


def _call_inline(fn, *args):
    return fn(*args)


class QueryScheduler:
    def __init__(
        self,
        deliver: Deliver,
        dispatch: Optional[Dispatch] = None,
        ranker: Optional[Ranker] = None,
        max_workers: Optional[int] = config.SCHEDULER_MAX_WORKERS,
    ):
        self._deliver = deliver
        self._dispatch = dispatch or _call_inline
        self.ranker = ranker or Ranker.from_strategy()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="editrank-query"
        )
        # guards the generation counter; never held while user code runs
        self._lock = threading.Lock()
        # serialises calls into deliver(), so deliveries land in generation order
        self._delivery_lock = threading.Lock()
        self._generation = 0
        self.delivered = 0
        self.dropped = 0

    @property
    def latest_generation(self) -> int:
        with self._lock:
            return self._generation

    # -----------------------
    # Submission
    # -----------------------

    def submit(self, query: str, snapshot: Optional[Sequence[str]]) -> Optional[QueryHandle]:
        """
        Start ranking ``query`` against ``snapshot`` and return immediately.

        ``snapshot`` is ``None`` while the dataset is still loading; nothing
        is submitted then and ``None`` is returned.
        """
        if snapshot is None:
            logger.debug("Dataset not ready; ignoring query {!r}", query)
            return None

        with self._lock:
            self._generation += 1
            generation = self._generation
            future = self._executor.submit(self._run, generation, query, snapshot)

        logger.debug("Submitted query {!r} as generation {}", query, generation)
        return QueryHandle(self, generation, query, future)

    # -----------------------
    # Unit of work
    # -----------------------

    def _run(self, generation: int, query: str, candidates: Sequence[str]) -> QueryOutcome:
        start = time.perf_counter()
        try:
            result = self.ranker.process(query, candidates)
            outcome = QueryOutcome.success(query, generation, result)
        except InputTooLarge as e:
            logger.warning("Query {!r} rejected: {}", query, e)
            outcome = QueryOutcome.failure(
                query, generation, e, ERROR_INPUT_TOO_LARGE, time.perf_counter() - start
            )
        except Exception as e:
            logger.opt(exception=e).warning("Ranking failed for query {!r}", query)
            failed = ComputationFailed(f"{type(e).__name__}: {e}")
            failed.__cause__ = e
            outcome = QueryOutcome.failure(
                query, generation, failed, ERROR_COMPUTATION_FAILED, time.perf_counter() - start
            )

        self._publish(outcome)
        return outcome

    # -----------------------
    # Delivery
    # -----------------------

    def _is_stale(self, outcome: QueryOutcome) -> bool:
        if outcome.generation != self._generation:
            self.dropped += 1
            logger.debug(
                "Dropping outcome of {!r} (generation {} < {})",
                outcome.query, outcome.generation, self._generation,
            )
            return True
        return False

    def _publish(self, outcome: QueryOutcome) -> None:
        with self._lock:
            if self._is_stale(outcome):
                return
        try:
            self._dispatch(self._deliver_if_current, outcome)
        except Exception:
            # e.g. the consumer's event loop is already closed
            logger.exception("Could not dispatch outcome of {!r}", outcome.query)

    def _deliver_if_current(self, outcome: QueryOutcome) -> None:
        # A delivery already inside deliver() when a newer query arrives counts
        # as happening before it; the newer outcome waits here for it to return.
        with self._delivery_lock:
            with self._lock:
                if self._is_stale(outcome):
                    return
                self.delivered += 1
            self._deliver(outcome)

    # -----------------------
    # Lifecycle
    # -----------------------

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "QueryScheduler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
