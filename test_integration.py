from __future__ import annotations

import towerhunt
from towerhunt import (
    GameSession,
    TowerHuntConfig,
    all_moves,
    apply_move_and_turn,
    check_win,
    find_best_move,
    get_engine,
    initial_state,
    undo_move,
)
from towerhunt.config import SearchRules


def test_end_to_end_move_and_search():
    config = TowerHuntConfig(search=SearchRules(max_depth=1))
    state = initial_state()
    user = state.current_player()

    # User opens, then the bot answers
    src, tgt = all_moves(state, user)[0]
    record = apply_move_and_turn(state, src, tgt, config.winning.max_stack_size)
    assert not check_win(state, user, config)

    before = state.copy()
    best = find_best_move(state, config)
    assert state == before
    assert best in all_moves(state, state.current_player())

    score, move = get_engine(config).search(state)
    assert move == best

    undo_move(state, record)
    assert state == initial_state()


def test_package_exports():
    for name in ("GameState", "BoardSnapshot", "find_best_move_with_timeout",
                 "InvalidMove", "SearchTimeout", "setup_logging", "load_config"):
        assert hasattr(towerhunt, name)
    assert isinstance(GameSession(), GameSession)
