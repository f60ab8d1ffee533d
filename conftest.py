from __future__ import annotations

import random
from typing import Callable, Optional

import pytest

from towerhunt.config import TowerHuntConfig
from towerhunt.moves import all_moves
from towerhunt.rules import apply_move_and_turn, check_win
from towerhunt.types import GameState, PlayerId, create_initial_state


def random_playout(seed: int, plies: int, config: Optional[TowerHuntConfig] = None,
                   bot_to_move: bool = True) -> Optional[GameState]:
    """Play random legal moves from the opening; None if the game ended on the way.

    With ``bot_to_move`` an extra ply is added when needed so the bot moves next.
    """
    config = config or TowerHuntConfig()
    rng = random.Random(seed)
    state = create_initial_state()
    if bot_to_move and plies % 2 == 0:
        plies += 1
    for _ in range(plies):
        player = state.current_player()
        moves = all_moves(state, player)
        if not moves:
            return None
        src, tgt = rng.choice(moves)
        apply_move_and_turn(state, src, tgt, config.winning.max_stack_size)
        if check_win(state, player, config):
            return None
    if check_win(state, state.player(PlayerId.BOT), config) or \
            check_win(state, state.player(PlayerId.USER), config):
        return None
    return state


@pytest.fixture
def playout() -> Callable[..., Optional[GameState]]:
    return random_playout


@pytest.fixture
def reachable_states():
    """A handful of mid-game positions with the bot to move."""
    states = []
    seed = 0
    while len(states) < 6 and seed < 200:
        state = random_playout(seed, plies=4 + seed % 9)
        if state is not None:
            states.append(state)
        seed += 1
    return states
