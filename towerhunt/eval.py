"""
Evaluation interfaces and the heuristic evaluator used at search leaves.

Scores are from the maximizing (bot) player's point of view. Won and lost
positions are scored +/- infinity by ``terminal_score`` before any heuristic
term is computed.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from towerhunt.config import TowerHuntConfig
from towerhunt.errors import InvalidState
from towerhunt.rules import check_win
from towerhunt.types import (
    BOT_HOME_ROW,
    BOT_MARK,
    ROWS,
    USER_MARK,
    GameState,
    PositionEvaluatorProtocol,
    Score,
)

# A side whose reversed towers are at most this many rows from safety in total
# gets the imminent-win bonus.
IMMINENT_WIN_DISTANCE = 4

_ROW_INDEX = np.arange(ROWS, dtype=np.int64).reshape(ROWS, 1)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class Evaluator(ABC):
    """Abstract evaluator interface for position scoring."""

    @abstractmethod
    def evaluate(self, state: GameState) -> Score:  # pragma: no cover
        """Heuristic score of a non-terminal position."""
        raise NotImplementedError


class HeuristicEvaluator(Evaluator):
    """Weighted sum of conquered material, safety-zone proximity and accounted material."""

    def __init__(self, config: TowerHuntConfig) -> None:
        self.config = config
        self._distance_weights = np.array(config.safety_zone.distance_weights(), dtype=np.float64)

    def _proximity_weight(self, distances: np.ndarray) -> float:
        if distances.size and ((distances < 1) | (distances > self._distance_weights.size)).any():
            raise InvalidState(
                f"Evaluation error for invalid material position: distances {distances.tolist()}")
        return float(self._distance_weights[distances - 1].sum())

    def evaluate(self, state: GameState) -> Score:
        cfg = self.config
        owners = state.ownership_grid()
        rows = np.broadcast_to(_ROW_INDEX, owners.shape)
        bot_cells = owners == BOT_MARK
        user_cells = owners == USER_MARK

        conquered = cfg.material_conquered
        score = (np.count_nonzero(bot_cells)
                 - conquered.opponent_weight * np.count_nonzero(user_cells)) * conquered.total_weight

        if cfg.winning.safety_zone_count > 0:
            proximity = cfg.safety_zone
            reversed_cells = state.reversed_grid()
            bot_distances = BOT_HOME_ROW - rows[bot_cells & reversed_cells]
            user_distances = rows[user_cells & reversed_cells]
            bot_weight = self._proximity_weight(bot_distances)
            user_weight = self._proximity_weight(user_distances)
            score += round_half_up(
                (bot_weight - proximity.opponent_weight * user_weight) * proximity.total_weight)

            bot_imminent = 1 if bot_distances.sum() <= IMMINENT_WIN_DISTANCE else 0
            user_imminent = 1 if user_distances.sum() <= IMMINENT_WIN_DISTANCE else 0
            score += ((bot_imminent - user_imminent * proximity.opponent_weight)
                      * proximity.safety_zone_total_distance * proximity.total_weight)

        if cfg.winning.opponent_vault_threshold > 0:
            bot, user = state.maximizer(), state.minimizer()
            score += (bot.vault.opponent - user.vault.opponent) * cfg.material_accounted.total_weight

        return float(score)


def terminal_score(state: GameState, depth: int, config: TowerHuntConfig,
                   evaluator: PositionEvaluatorProtocol) -> Optional[Score]:
    """
    Score of a search node if it is terminal, else None.

    Wins are checked first (bot, then user) and short-circuit to +/- inf.
    Otherwise the heuristic is applied only at the configured maximum depth.
    """
    if check_win(state, state.maximizer(), config):
        return math.inf
    if check_win(state, state.minimizer(), config):
        return -math.inf
    if depth == config.search.max_depth:
        return evaluator.evaluate(state)
    return None


def get_evaluator(config: Optional[TowerHuntConfig] = None) -> Evaluator:
    return HeuristicEvaluator(config or TowerHuntConfig())


__all__ = [
    "Evaluator",
    "HeuristicEvaluator",
    "get_evaluator",
    "terminal_score",
    "round_half_up",
]
