from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
DATASET_CACHE_PATH = Path(
    os.getenv("EDITRANK_DATASET_PATH", str(DATA_DIR / "systems.json"))
)


# ---------------------------
# Dataset source
# ---------------------------

# Star system names; the name field of every record becomes a candidate.
DEFAULT_DATASET_URL = "http://eddb.io/archive/v3/systems.json"
DATASET_URL = os.getenv("EDITRANK_DATASET_URL", DEFAULT_DATASET_URL)
DATASET_NAME_FIELD = "name"


# ---------------------------
# Matching settings
# ---------------------------

# Operand lengths must fit in 31 bits.
MAX_INPUT_LENGTH = 2**31 - 1

DEFAULT_TOP_K = int(os.getenv("EDITRANK_TOP_K", "10"))
MAX_TOP_K = 100

# The type-ahead surface only ranks once the user typed more than 3 chars.
MIN_QUERY_CHARS = 4

STRATEGY_FULL_TABLE = "full_table"
STRATEGY_ROLLING = "rolling"
DEFAULT_STRATEGY = os.getenv("EDITRANK_STRATEGY", STRATEGY_ROLLING)


# ---------------------------
# Scheduler
# ---------------------------

_workers_env = os.getenv("EDITRANK_MAX_WORKERS")
SCHEDULER_MAX_WORKERS: Optional[int] = int(_workers_env) if _workers_env else None


# ---------------------------
# Dataset download / HTTP hardening
# ---------------------------

HTTP_CONNECT_TIMEOUT = 5.0
HTTP_READ_TIMEOUT = 60.0
HTTP_MAX_REDIRECTS = 3
HTTP_MAX_BYTES = 512 * 1024 * 1024  # the full systems dump is large

HTTP_USER_AGENT = "editrank/1.0 (+https://example.com)"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class SearchRequest(BaseModel):
    """
    Request body for POST /search.
    """

    query: str
    k: int = Field(default=DEFAULT_TOP_K, ge=1, le=MAX_TOP_K)
    strategy: str = DEFAULT_STRATEGY


class ScoredItem(BaseModel):
    """
    One ranked candidate as it appears on the wire.
    """

    text: str
    score: float = Field(ge=0.0, le=100.0)
    hint: str


class SearchResponse(BaseModel):
    """
    Response body for POST /search.
    """

    query: str
    strategy: str
    elapsed_ms: float
    results: List[ScoredItem]


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
    dataset_ready: bool = False
    dataset_size: int = 0


class OutcomeMessage(BaseModel):
    """
    One frame sent over the /ws/search type-ahead socket.
    """

    ok: bool
    query: str
    generation: int = 0
    elapsed_ms: float = 0.0
    results: List[ScoredItem] = Field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None
