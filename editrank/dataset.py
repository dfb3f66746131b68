from __future__ import annotations

"""
Dataset provider: the ordered list of candidate strings.

The default dataset is the ``name`` of every record in a JSON array that is
downloaded once and cached on disk.  Any download or parse failure degrades
to an empty dataset; it is never an engine error.

``DatasetProvider`` loads in the background and exposes an explicit readiness
signal: ``snapshot()`` is ``None`` until loading finished.
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import httpx
import numpy as np
import pandas as pd
from loguru import logger

from .config import (
    DATASET_CACHE_PATH,
    DATASET_NAME_FIELD,
    DATASET_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_MAX_BYTES,
    HTTP_MAX_REDIRECTS,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
)


@dataclass(frozen=True)
class DatasetSnapshot:
    """Immutable, ordered candidate names; safe to share between threads."""

    names: Tuple[str, ...] = field(default_factory=tuple)
    source: str = ""

    @classmethod
    def of(cls, names: Sequence[str], source: str = "") -> "DatasetSnapshot":
        return cls(tuple(names), source)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __getitem__(self, idx):
        return self.names[idx]


# ---------------------------
# Download / parse
# ---------------------------

def download_dataset(url: str = DATASET_URL, dest: Path = DATASET_CACHE_PATH) -> bool:
    """
    Fetch ``url`` into ``dest``.  Returns False (and logs) on any failure.

    Hardening:
      - httpx with connect/read timeouts and a redirect cap
      - body streamed to disk; aborted as soon as it passes the byte cap
      - written to a temp file first so a partial download never looks cached
    """
    headers = {"User-Agent": HTTP_USER_AGENT}
    tmp = dest.with_suffix(dest.suffix + ".part")
    try:
        with httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
            max_redirects=HTTP_MAX_REDIRECTS,
        ) as client:
            with client.stream("GET", url, headers=headers) as r:
                if r.status_code >= 400:
                    logger.warning("Dataset download: HTTP {} for {}", r.status_code, url)
                    return False

                dest.parent.mkdir(parents=True, exist_ok=True)
                received = 0
                with tmp.open("wb") as f:
                    for chunk in r.iter_bytes():
                        received += len(chunk)
                        if received > HTTP_MAX_BYTES:
                            logger.warning(
                                "Dataset download aborted: more than {} bytes", HTTP_MAX_BYTES
                            )
                            break
                        f.write(chunk)
                if received > HTTP_MAX_BYTES:
                    tmp.unlink()
                    return False

            tmp.replace(dest)
            logger.info("Downloaded dataset from {} ({} bytes) to {}", url, received, dest)
            return True
    except httpx.TimeoutException:
        logger.warning("Dataset download timeout for {}", url)
    except Exception as e:
        logger.warning("Dataset download failed for {}: {}", url, e)
    if tmp.exists():
        tmp.unlink()
    return False


def parse_names(path: Path, name_field: str = DATASET_NAME_FIELD) -> List[str]:
    """
    Read a JSON array of records and return the ``name_field`` values in file
    order.  Records without a usable string name are skipped.
    """
    try:
        df = pd.read_json(path, orient="records", dtype=False)
    except Exception as e:
        logger.warning("Dataset parse failed for {}: {}", path, e)
        return []

    if df.empty or name_field not in df.columns:
        logger.warning("Dataset {} has no '{}' column", path, name_field)
        return []

    names = df[name_field]
    keep = names.map(lambda v: isinstance(v, str) and bool(v.strip())).astype(bool)
    dropped = int((~keep).sum())
    if dropped:
        logger.info("Skipped {} records without a usable name", dropped)
    return names[keep].tolist()


def load_dataset(path: Optional[Path] = None, url: Optional[str] = None) -> DatasetSnapshot:
    """
    Load the candidate dataset, downloading it first if the cache is missing.

    Always returns a snapshot; failures yield an empty one.
    """
    path = Path(path) if path is not None else DATASET_CACHE_PATH
    url = url or DATASET_URL

    if not path.exists():
        logger.info("Dataset cache {} missing; downloading from {}", path, url)
        if not download_dataset(url, path):
            return DatasetSnapshot(source=str(path))

    names = parse_names(path)
    logger.info("Loaded dataset with {} names from {}", len(names), path)
    return DatasetSnapshot.of(names, source=str(path))


# ---------------------------
# Readiness
# ---------------------------

class DatasetProvider:
    """Loads the dataset once, in the background, and signals readiness."""

    def __init__(self, path: Optional[Path] = None, url: Optional[str] = None, loader=load_dataset):
        self._path = path
        self._url = url
        self._loader = loader
        self._snapshot: Optional[DatasetSnapshot] = None
        self._thread: Optional[threading.Thread] = None
        self.ready = threading.Event()

    @classmethod
    def preloaded(cls, snapshot: DatasetSnapshot) -> "DatasetProvider":
        """A provider that is ready from the start, for embedding and tests."""
        provider = cls(loader=lambda _path, _url: snapshot)
        provider._snapshot = snapshot
        provider.ready.set()
        return provider

    def start(self) -> "DatasetProvider":
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._load, name="editrank-dataset", daemon=True
            )
            self._thread.start()
        return self

    def _load(self) -> None:
        try:
            snapshot = self._loader(self._path, self._url)
        except Exception:
            logger.exception("Dataset loader crashed; continuing with an empty dataset")
            snapshot = DatasetSnapshot()
        self._snapshot = snapshot
        self.ready.set()

    def snapshot(self) -> Optional[DatasetSnapshot]:
        return self._snapshot if self.ready.is_set() else None

    def wait(self, timeout: Optional[float] = None) -> Optional[DatasetSnapshot]:
        self.ready.wait(timeout)
        return self.snapshot()


# ---------------------------
# Synthetic data (benchmarks / tests)
# ---------------------------

def mutate(text: str, rng: np.random.Generator) -> str:
    """
    Drop one random character, then (usually) insert a random printable ASCII
    character at the same spot.  Drawing code 126 means "delete only".
    """
    if not text:
        return text
    pos = int(rng.integers(0, max(len(text) - 1, 1)))
    action = int(rng.integers(32, 127))
    text = text[:pos] + text[pos + 1:]
    if action != 126:
        text = text[:pos] + chr(action) + text[pos:]
    return text


def build_synthetic_dataset(
    count: int, seed: str, rng: Optional[np.random.Generator] = None
) -> List[str]:
    """``seed`` followed by ``count`` successive mutations of it."""
    if rng is None:
        rng = np.random.default_rng()
    data = [seed]
    for _ in range(count):
        seed = mutate(seed, rng)
        data.append(seed)
    return data
