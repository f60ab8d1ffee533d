"""
Minimax search with alpha-beta pruning, plus the strategy interface around it.

The engine walks the tree on one private copy of the caller's state,
applying and undoing moves in place. Every move applied at a depth is undone
before that call returns, so sibling branches see identical states.
"""
from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from towerhunt.config import TowerHuntConfig
from towerhunt.errors import InvalidInvocation, NoLegalMoves
from towerhunt.eval import HeuristicEvaluator, terminal_score
from towerhunt.moves import MoveGenerator
from towerhunt.rules import apply_move_and_turn, undo_move
from towerhunt.types import GameResult, GameState, MovePair, PositionEvaluatorProtocol, Score

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Counters for one top-level search."""
    nodes: int = 0
    leaves: int = 0
    cutoffs: int = 0
    elapsed: float = 0.0


class MinimaxSearchEngine:
    """Depth-limited minimax over the TowerHunt move tree.

    With ``prune=False`` the engine expands every node; it serves as the
    reference the pruned search must agree with.
    """

    def __init__(self, config: TowerHuntConfig, evaluator: Optional[PositionEvaluatorProtocol] = None,
                 prune: bool = True) -> None:
        # Weights must not change under a running search
        self.config = config.model_copy(deep=True)
        self.evaluator: PositionEvaluatorProtocol = evaluator or HeuristicEvaluator(self.config)
        self.prune = prune
        self.generator = MoveGenerator()
        self.stats = SearchStats()

    def minimax(self, state: GameState, depth: int, alpha: Score, beta: Score) -> Score:
        self.stats.nodes += 1
        evaluation = terminal_score(state, depth, self.config, self.evaluator)
        if evaluation is not None:
            self.stats.leaves += 1
            return evaluation

        player = state.current_player()
        max_stack = self.config.winning.max_stack_size
        moves: List[MovePair] = self.generator.legal_moves(state, player)
        if player.is_maximizing:
            best = -math.inf
            for src, tgt in moves:
                record = apply_move_and_turn(state, src, tgt, max_stack)
                value = self.minimax(state, depth + 1, alpha, beta)
                undo_move(state, record)
                best = max(best, value)
                alpha = max(alpha, best)
                if self.prune and beta <= alpha:
                    self.stats.cutoffs += 1
                    break
            return best

        best = math.inf
        for src, tgt in moves:
            record = apply_move_and_turn(state, src, tgt, max_stack)
            value = self.minimax(state, depth + 1, alpha, beta)
            undo_move(state, record)
            best = min(best, value)
            beta = min(beta, best)
            if self.prune and beta <= alpha:
                self.stats.cutoffs += 1
                break
        return best

    def search(self, state: GameState) -> GameResult:
        """Best (score, move) for the maximizing player to move in ``state``.

        ``state`` itself is never modified.
        """
        self.stats = SearchStats()
        start = time.perf_counter()
        work = state.copy()
        player = work.current_player()
        if player is None or not player.is_maximizing:
            raise InvalidInvocation(
                "find_best_move must be invoked for the bot AI opponent (maximizing player).")
        moves = self.generator.legal_moves(work, player)
        if not moves:
            raise NoLegalMoves(f"could not determine possible moves for {player.id.value}")

        max_stack = self.config.winning.max_stack_size
        best_score: Score = -math.inf
        best_move: Optional[MovePair] = None
        for src, tgt in moves:
            record = apply_move_and_turn(work, src, tgt, max_stack)
            score = self.minimax(work, 0, -math.inf, math.inf)
            undo_move(work, record)
            if score > best_score:
                best_score = score
                best_move = (src, tgt)

        if best_move is None:
            best_move = moves[0]
        self.stats.elapsed = time.perf_counter() - start
        logger.debug("search: move=%s score=%s nodes=%d leaves=%d cutoffs=%d in %.3fs",
                     best_move, best_score, self.stats.nodes, self.stats.leaves,
                     self.stats.cutoffs, self.stats.elapsed)
        return best_score, best_move


def find_best_move(state: GameState, config: TowerHuntConfig) -> MovePair:
    """Best (source id, target id) for the maximizing player, by alpha-beta search."""
    _, move = MinimaxSearchEngine(config).search(state)
    return move  # type: ignore[return-value]


class SearchStrategy(ABC):
    """Abstract interface for search strategies."""

    @abstractmethod
    def search(self, state: GameState) -> GameResult:  # pragma: no cover
        raise NotImplementedError


class AlphaBetaSearchStrategy(SearchStrategy):
    """Adapter around MinimaxSearchEngine implementing the interface."""

    def __init__(self, config: Optional[TowerHuntConfig] = None) -> None:
        self._engine = MinimaxSearchEngine(config or TowerHuntConfig())

    @property
    def stats(self) -> SearchStats:
        return self._engine.stats

    def search(self, state: GameState) -> GameResult:
        return self._engine.search(state)


def get_search_strategy(config: Optional[TowerHuntConfig] = None) -> SearchStrategy:
    """Factory for a default search strategy (alpha-beta)."""
    return AlphaBetaSearchStrategy(config)


__all__ = [
    "MinimaxSearchEngine",
    "SearchStats",
    "SearchStrategy",
    "AlphaBetaSearchStrategy",
    "get_search_strategy",
    "find_best_move",
]
