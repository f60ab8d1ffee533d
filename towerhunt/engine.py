"""
Public engine API.

Re-exports the rule and search entry points and adds
``find_best_move_with_timeout``, which runs the search in a worker process
and terminates it when the deadline passes. The search itself has no
notion of time; a timed-out search yields no move at all.
"""
from __future__ import annotations

import logging
import multiprocessing as mp
from typing import Optional

from towerhunt.config import ConfigDict, TowerHuntConfig
from towerhunt.errors import SearchTimeout
from towerhunt.moves import all_moves, legal_moves
from towerhunt.rules import apply_move_and_turn, check_win, switch_turn, undo_move
from towerhunt.search import MinimaxSearchEngine, find_best_move
from towerhunt.types import GameState, MovePair, SnapshotDict, create_initial_state

logger = logging.getLogger(__name__)

__all__ = [
    "initial_state",
    "legal_moves",
    "all_moves",
    "apply_move_and_turn",
    "undo_move",
    "switch_turn",
    "check_win",
    "find_best_move",
    "find_best_move_with_timeout",
    "get_engine",
]


def initial_state() -> GameState:
    return create_initial_state()


def get_engine(config: Optional[TowerHuntConfig] = None) -> MinimaxSearchEngine:
    """Get a new search engine instance."""
    return MinimaxSearchEngine(config or TowerHuntConfig())


def _search_worker(snapshot: SnapshotDict, config_data: ConfigDict) -> MovePair:
    # Runs in the worker process: rebuild state and config from plain data
    state = GameState.from_snapshot(snapshot)
    config = TowerHuntConfig.model_validate(config_data)
    return find_best_move(state, config)


def find_best_move_with_timeout(state: GameState, config: TowerHuntConfig,
                                timeout: Optional[float] = None) -> MovePair:
    """
    Run ``find_best_move`` in a separate process, bounded by a wall-clock deadline.

    The deadline defaults to ``config.search.timeout_seconds``. On expiry the
    worker is terminated and SearchTimeout is raised. Engine errors raised in
    the worker propagate unchanged.

    Each call starts a fresh interpreter; its startup and the numpy and
    pydantic imports count against the deadline, so a very short timeout can
    expire before the search itself begins.
    """
    limit = float(timeout if timeout is not None else config.search.timeout_seconds)
    ctx = mp.get_context("spawn")
    pool = ctx.Pool(processes=1)
    try:
        pending = pool.apply_async(_search_worker, (state.to_snapshot(), config.to_dict()))
        try:
            move = pending.get(timeout=limit)
        except mp.TimeoutError as exc:
            logger.warning("search did not finish within %.2fs; worker terminated", limit)
            raise SearchTimeout(f"no move found within {limit:.2f}s") from exc
    finally:
        pool.terminate()
        pool.join()
    return move
