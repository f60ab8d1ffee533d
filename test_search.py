import math

import pytest

from towerhunt.config import SearchRules, TowerHuntConfig
from towerhunt.errors import InvalidInvocation, NoLegalMoves
from towerhunt.moves import all_moves
from towerhunt.search import (
    AlphaBetaSearchStrategy,
    MinimaxSearchEngine,
    find_best_move,
    get_search_strategy,
)
from towerhunt.types import PlayerId, cell_id, create_empty_state, create_initial_state, place_tower

USER = PlayerId.USER
BOT = PlayerId.BOT


def shallow_config(depth=1):
    return TowerHuntConfig(search=SearchRules(max_depth=depth))


def test_search_rejects_minimizing_side_to_move():
    with pytest.raises(InvalidInvocation):
        find_best_move(create_initial_state(), shallow_config())


def test_search_without_moves_raises():
    state = create_empty_state(user_to_move=False)
    place_tower(state, 0, 3, [BOT], direction=-1)
    place_tower(state, 2, 2, [USER])
    state.player(BOT).last_move_was_lateral = True
    with pytest.raises(NoLegalMoves):
        find_best_move(state, shallow_config())


def test_search_takes_the_securing_move():
    state = create_empty_state(user_to_move=False)
    place_tower(state, 3, 0, [BOT])
    place_tower(state, 4, 2, [BOT], reversed=True)
    place_tower(state, 0, 5, [USER])
    score, move = MinimaxSearchEngine(shallow_config()).search(state)
    assert move == (cell_id(4, 2), cell_id(5, 2))
    assert score == math.inf


def test_search_returns_first_move_when_every_move_loses():
    state = create_empty_state(user_to_move=False)
    place_tower(state, 4, 0, [BOT])
    place_tower(state, 1, 3, [USER], reversed=True)
    score, move = MinimaxSearchEngine(shallow_config()).search(state)
    assert score == -math.inf
    assert move == (cell_id(4, 0), cell_id(3, 0))


def test_search_does_not_modify_the_callers_state(reachable_states):
    state = reachable_states[0]
    before = state.copy()
    move = find_best_move(state, shallow_config())
    assert state == before
    assert move in all_moves(state, state.player(BOT))


def test_minimax_restores_the_state_it_walks(reachable_states):
    engine = MinimaxSearchEngine(shallow_config(depth=2))
    for state in reachable_states[:3]:
        before = state.copy()
        engine.minimax(state, 0, -math.inf, math.inf)
        assert state == before


def test_pruning_matches_full_minimax_on_reachable_states(reachable_states):
    config = shallow_config()
    for state in reachable_states:
        pruned = MinimaxSearchEngine(config, prune=True)
        full = MinimaxSearchEngine(config, prune=False)
        assert pruned.search(state) == full.search(state)
        assert pruned.stats.nodes <= full.stats.nodes
        assert full.stats.cutoffs == 0


def test_pruning_matches_full_minimax_at_depth_two():
    state = create_empty_state(user_to_move=False)
    place_tower(state, 4, 1, [BOT])
    place_tower(state, 2, 4, [BOT, USER, BOT])
    place_tower(state, 1, 2, [USER])
    place_tower(state, 3, 5, [USER], reversed=True)
    config = shallow_config(depth=2)
    pruned = MinimaxSearchEngine(config).search(state)
    full = MinimaxSearchEngine(config, prune=False).search(state)
    assert pruned == full


def test_engine_copies_its_config():
    config = shallow_config()
    engine = MinimaxSearchEngine(config)
    config.search.max_depth = 4
    assert engine.config.search.max_depth == 1


def test_search_stats_are_collected(reachable_states):
    engine = MinimaxSearchEngine(shallow_config())
    engine.search(reachable_states[0])
    assert engine.stats.nodes > 0
    assert 0 < engine.stats.leaves <= engine.stats.nodes
    assert engine.stats.elapsed >= 0.0


def test_strategy_factory(reachable_states):
    strategy = get_search_strategy(shallow_config())
    assert isinstance(strategy, AlphaBetaSearchStrategy)
    score, move = strategy.search(reachable_states[0])
    assert move is not None
    assert strategy.stats.nodes > 0
    assert isinstance(score, float)


class CountingEvaluator:
    """Scores every leaf by the number of bot towers."""

    def __init__(self):
        self.calls = 0

    def evaluate(self, state):
        self.calls += 1
        return float(len(state.towers_of(BOT)))


def test_search_accepts_any_position_evaluator():
    state = create_empty_state(user_to_move=False)
    place_tower(state, 3, 0, [BOT])
    place_tower(state, 2, 0, [USER])
    evaluator = CountingEvaluator()
    score, move = MinimaxSearchEngine(shallow_config(depth=0), evaluator=evaluator).search(state)
    # Stacking onto the user tower leaves no user tower and wins by wipeout;
    # every other move is scored by the evaluator
    assert evaluator.calls == len(all_moves(state, state.player(BOT))) - 1
    assert score == math.inf
    assert move == (cell_id(3, 0), cell_id(2, 0))
