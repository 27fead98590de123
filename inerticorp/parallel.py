"""Parallel execution helpers using a multiprocessing pool."""
from __future__ import annotations

import multiprocessing as mp
from typing import Iterable, List

from .config import GameConfig
from .engine.runner import GameResult, run_once

__all__ = ["run_batch"]


def _worker(args):  # type: ignore
    cfg, policy_name = args
    result = run_once(cfg, policy_name)
    # The final snapshot is large; workers return the summary only
    result.state = None
    return result


def run_batch(configs: Iterable[GameConfig], policy_name: str, processes: int | None = None) -> List[GameResult]:
    """Play many games in parallel, one per config."""

    with mp.Pool(processes=processes) as pool:
        results = pool.map(_worker, [(cfg, policy_name) for cfg in configs])
    return results
