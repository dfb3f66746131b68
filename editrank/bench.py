# editrank/bench.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from . import config
from .dataset import build_synthetic_dataset, load_dataset
from .ranking import Ranker, RankingResult

# ---------- run ----------

def run_strategies(
    query: str,
    candidates: Sequence[str],
    strategies: Sequence[str],
    k: int = config.DEFAULT_TOP_K,
) -> Dict[str, RankingResult]:
    """Rank the same dataset once per strategy, in the order given."""
    out: Dict[str, RankingResult] = {}
    for name in strategies:
        out[name] = Ranker.from_strategy(name, k=k).process(query, candidates)
    return out


def results_frame(results: Dict[str, RankingResult]) -> pd.DataFrame:
    rows = []
    for name, result in results.items():
        for pos, item in enumerate(result.items, start=1):
            rows.append(
                {
                    "strategy": name,
                    "rank": pos,
                    "text": item.text,
                    "score": item.score,
                    "elapsed_ms": result.elapsed * 1000.0,
                }
            )
    return pd.DataFrame(rows, columns=["strategy", "rank", "text", "score", "elapsed_ms"])

# ---------- CLI ----------

def _load_candidates(args) -> List[str]:
    if args.synthetic:
        rng = np.random.default_rng(args.random_seed)
        return build_synthetic_dataset(args.synthetic, args.seed, rng)
    return list(load_dataset(args.dataset))


def main(argv=None):
    ap = argparse.ArgumentParser(description="Compare edit-distance strategies on one query.")
    ap.add_argument("query")
    ap.add_argument("--dataset", type=Path, default=None,
                    help="JSON array of records with a 'name' field (downloaded if missing)")
    ap.add_argument("--synthetic", type=int, default=0,
                    help="Rank against N synthetic mutations of --seed instead")
    ap.add_argument("--seed", default="monitoring")
    ap.add_argument("--random_seed", type=int, default=None)
    ap.add_argument("--k", type=int, default=config.DEFAULT_TOP_K)
    ap.add_argument("--strategy", nargs="+", default=sorted({config.STRATEGY_FULL_TABLE,
                                                           config.STRATEGY_ROLLING}))
    ap.add_argument("--out", type=Path, default=None, help="Optional CSV of every ranked row")
    args = ap.parse_args(argv)

    candidates = _load_candidates(args)
    results = run_strategies(args.query, candidates, args.strategy, k=args.k)

    for name, result in results.items():
        print(f"{name}: {result.elapsed * 1000.0:.2f} ms over {len(candidates)} candidates")
        for hint in result.hints:
            print(f"  {hint}")

    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        results_frame(results).to_csv(args.out, index=False, encoding="utf-8")

if __name__ == "__main__":
    main()
