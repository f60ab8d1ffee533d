"""TowerHunt rules engine and alpha-beta search.

Usage examples:
    from towerhunt import initial_state, all_moves, apply_move_and_turn
    from towerhunt import TowerHuntConfig, find_best_move
    from towerhunt import GameSession
"""
from __future__ import annotations

# Board model
from .types import Cell, GameState, Move, Player, PlayerId, Vault

# Errors
from .errors import (
    InvalidInvocation,
    InvalidMove,
    InvalidState,
    NoLegalMoves,
    SearchTimeout,
    TowerHuntError,
)

# Configuration
from .config import TowerHuntConfig, load_config, setup_logging

# Engine API
from .engine import (
    initial_state,
    legal_moves,
    all_moves,
    apply_move_and_turn,
    undo_move,
    switch_turn,
    check_win,
    find_best_move,
    find_best_move_with_timeout,
    get_engine,
)

# Evaluation and search
from .eval import Evaluator, HeuristicEvaluator, get_evaluator
from .search import MinimaxSearchEngine, SearchStrategy, get_search_strategy

# Snapshot contract and game loop
from .snapshot import BoardSnapshot
from .game import GameSession
