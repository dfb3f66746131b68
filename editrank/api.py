from __future__ import annotations

"""
FastAPI application for the edit-distance search engine.

- GET  /health      readiness of the background-loaded dataset
- POST /search      one-shot ranking, answered synchronously
- WS   /ws/search   type-ahead: every frame is a query, only the latest
                    query's outcome is sent back
"""

import asyncio
import contextlib
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config import (
    DEFAULT_STRATEGY,
    DEFAULT_TOP_K,
    MAX_TOP_K,
    MIN_QUERY_CHARS,
    HealthResponse,
    OutcomeMessage,
    ScoredItem,
    SearchRequest,
    SearchResponse,
)
from .dataset import DatasetProvider, DatasetSnapshot
from .errors import InputTooLarge
from .ranking import Ranker, RankingResult, format_hint
from .scheduler import QueryOutcome, QueryScheduler

ERROR_NOT_READY = "not_ready"


# -----------------------
# Mapping helpers
# -----------------------

def to_items(result: Optional[RankingResult]) -> list[ScoredItem]:
    if result is None:
        return []
    return [
        ScoredItem(text=item.text, score=item.score, hint=format_hint(item))
        for item in result.items
    ]


def outcome_message(outcome: QueryOutcome) -> OutcomeMessage:
    return OutcomeMessage(
        ok=outcome.ok,
        query=outcome.query,
        generation=outcome.generation,
        elapsed_ms=outcome.elapsed * 1000.0,
        results=to_items(outcome.result),
        error=outcome.error,
        error_kind=outcome.error_kind,
    )


def _make_ranker(strategy: Optional[str], k: int) -> Ranker:
    try:
        return Ranker.from_strategy(strategy, k=k)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_provider: Optional[DatasetProvider] = None


@app.on_event("startup")
def startup_event() -> None:
    global _provider
    if _provider is None:
        logger.info("Starting dataset load in the background...")
        _provider = DatasetProvider().start()


def current_snapshot() -> Optional[DatasetSnapshot]:
    return _provider.snapshot() if _provider is not None else None


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    snapshot = current_snapshot()
    return HealthResponse(
        status="healthy",
        dataset_ready=snapshot is not None,
        dataset_size=len(snapshot) if snapshot is not None else 0,
    )


@app.post("/search", response_model=SearchResponse)
def search(req: SearchRequest) -> SearchResponse:
    snapshot = current_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Dataset not loaded yet")

    ranker = _make_ranker(req.strategy, req.k)
    try:
        result = ranker.process(req.query, snapshot)
    except InputTooLarge as e:
        raise HTTPException(status_code=422, detail=str(e))

    return SearchResponse(
        query=req.query,
        strategy=ranker.description,
        elapsed_ms=result.elapsed * 1000.0,
        results=to_items(result),
    )


# -----------------------
# Type-ahead socket
# -----------------------

async def _pump(websocket: WebSocket, outbox: asyncio.Queue) -> None:
    while True:
        message: OutcomeMessage = await outbox.get()
        await websocket.send_json(message.model_dump())


async def _stop(task: asyncio.Task) -> None:
    """Cancel ``task`` and collect whatever it ended with (e.g. a send to a closed socket)."""
    task.cancel()
    with contextlib.suppress(Exception, asyncio.CancelledError):
        await task


@app.websocket("/ws/search")
async def search_stream(websocket: WebSocket) -> None:
    params = websocket.query_params
    try:
        k = int(params.get("k", DEFAULT_TOP_K))
        if not 1 <= k <= MAX_TOP_K:
            raise ValueError(f"k must be between 1 and {MAX_TOP_K}")
        ranker = Ranker.from_strategy(params.get("strategy", DEFAULT_STRATEGY), k=k)
    except ValueError as e:
        logger.warning("Rejecting search socket: {}", e)
        await websocket.close(code=1008)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    outbox: asyncio.Queue = asyncio.Queue()

    scheduler = QueryScheduler(
        deliver=lambda outcome: outbox.put_nowait(outcome_message(outcome)),
        dispatch=loop.call_soon_threadsafe,
        ranker=ranker,
    )
    sender = asyncio.create_task(_pump(websocket, outbox))
    try:
        while True:
            query = await websocket.receive_text()
            if len(query) < MIN_QUERY_CHARS:
                continue
            if scheduler.submit(query, current_snapshot()) is None:
                outbox.put_nowait(
                    OutcomeMessage(
                        ok=False,
                        query=query,
                        error="Dataset not loaded yet",
                        error_kind=ERROR_NOT_READY,
                    )
                )
    except WebSocketDisconnect:
        logger.debug("Search socket closed ({} delivered, {} dropped)",
                     scheduler.delivered, scheduler.dropped)
    finally:
        await _stop(sender)
        scheduler.close(wait=False)
