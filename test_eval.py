import math

import pytest

from towerhunt.config import TowerHuntConfig, WinningRules
from towerhunt.errors import InvalidState
from towerhunt.eval import HeuristicEvaluator, get_evaluator, round_half_up, terminal_score
from towerhunt.types import PlayerId, create_empty_state, create_initial_state, place_tower

USER = PlayerId.USER
BOT = PlayerId.BOT


@pytest.fixture
def config():
    return TowerHuntConfig()


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(-2.6) == -3
    assert round_half_up(0.49) == 0


def test_opening_position_score(config):
    # Material is level; both sides get the imminent flag with no reversed towers
    # (1 - 1 * 2.0) * 8 * 10
    assert HeuristicEvaluator(config).evaluate(create_initial_state()) == -80.0


def test_mixed_position_score(config):
    state = create_empty_state(user_to_move=False)
    place_tower(state, 0, 0, [BOT], reversed=True)
    place_tower(state, 4, 1, [BOT], reversed=True)
    place_tower(state, 5, 5, [BOT])
    place_tower(state, 3, 2, [USER], reversed=True)
    place_tower(state, 4, 3, [USER], reversed=True)
    # material: (3 - 2) * 70 = 70
    # proximity: bot distances 5, 1 -> 7 + 10; user distances 3, 4 -> 8 + 7
    #            (17 - 2.0 * 15) * 10 = -130
    # imminent: bot 6 > 4, user 7 > 4 -> 0
    assert HeuristicEvaluator(config).evaluate(state) == -60.0


def test_stack_composition_does_not_matter_only_top(config):
    state = create_empty_state()
    place_tower(state, 2, 0, [USER, USER, BOT])
    place_tower(state, 3, 0, [BOT, USER])
    single = create_empty_state()
    place_tower(single, 2, 0, [BOT])
    place_tower(single, 3, 0, [USER])
    evaluator = HeuristicEvaluator(config)
    assert evaluator.evaluate(state) == evaluator.evaluate(single)


def test_vault_term_counts_opponent_stones(config):
    state = create_initial_state()
    state.player(BOT).vault.opponent = 2
    state.player(USER).vault.own = 5
    assert HeuristicEvaluator(config).evaluate(state) == -80.0 + 2 * 40


def test_vault_term_disabled_by_zero_threshold():
    config = TowerHuntConfig(winning=WinningRules(opponent_vault_threshold=0))
    state = create_initial_state()
    state.player(BOT).vault.opponent = 2
    assert HeuristicEvaluator(config).evaluate(state) == -80.0


def test_reversed_tower_on_own_home_row_is_invalid(config):
    evaluator = HeuristicEvaluator(config)
    state = create_empty_state()
    place_tower(state, 0, 2, [USER], reversed=True)
    with pytest.raises(InvalidState):
        evaluator.evaluate(state)

    state = create_empty_state()
    place_tower(state, 5, 2, [BOT], reversed=True)
    with pytest.raises(InvalidState):
        evaluator.evaluate(state)


def test_terminal_score_short_circuits_on_wins(config):
    evaluator = get_evaluator(config)
    state = create_initial_state()
    state.player(BOT).towers_secured = 1
    assert terminal_score(state, 0, config, evaluator) == math.inf

    state = create_initial_state()
    state.player(USER).towers_secured = 1
    assert terminal_score(state, 0, config, evaluator) == -math.inf


def test_terminal_score_evaluates_only_at_max_depth(config):
    evaluator = get_evaluator(config)
    state = create_initial_state()
    assert terminal_score(state, config.search.max_depth - 1, config, evaluator) is None
    assert terminal_score(state, config.search.max_depth, config, evaluator) == -80.0


def test_evaluation_is_deterministic_on_reachable_states(reachable_states, config):
    evaluator = HeuristicEvaluator(config)
    for state in reachable_states:
        before = state.copy()
        first = evaluator.evaluate(state)
        assert evaluator.evaluate(state) == first
        assert state == before
