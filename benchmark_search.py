#!/usr/bin/env python3
"""
Time alpha-beta searches from random mid-game positions at several depths.
Also reports how many nodes pruning saves against the full minimax.
"""
from __future__ import annotations

import argparse
import logging
import random
import time
from typing import List, Optional

import numpy as np

from towerhunt.config import SearchRules, TowerHuntConfig, load_config, setup_logging
from towerhunt.moves import all_moves
from towerhunt.rules import apply_move_and_turn, check_win
from towerhunt.search import MinimaxSearchEngine
from towerhunt.types import GameState, PlayerId, create_initial_state

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Benchmark the TowerHunt search")
    ap.add_argument("--depths", type=int, nargs="+", default=[1, 2, 3], help="Search depths to time")
    ap.add_argument("--positions", type=int, default=5, help="Number of random positions per depth")
    ap.add_argument("--seed", type=int, default=0, help="Seed for the random openings")
    ap.add_argument("--compare", action="store_true", help="Also run the unpruned search")
    ap.add_argument("--config", default=None, help="JSON config file (defaults to environment)")
    return ap.parse_args()


def random_position(rng: random.Random, plies: int, config: TowerHuntConfig) -> Optional[GameState]:
    state = create_initial_state()
    for _ in range(plies):
        player = state.current_player()
        moves = all_moves(state, player)
        if not moves:
            return None
        apply_move_and_turn(state, *rng.choice(moves), config.winning.max_stack_size)
        if check_win(state, player, config):
            return None
    if not state.player(PlayerId.BOT).has_turn:
        return None
    return state


def collect_positions(count: int, seed: int, config: TowerHuntConfig) -> List[GameState]:
    rng = random.Random(seed)
    positions: List[GameState] = []
    while len(positions) < count:
        state = random_position(rng, plies=2 * rng.randint(2, 6) + 1, config=config)
        if state is not None:
            positions.append(state)
    return positions


def benchmark_depth(positions: List[GameState], config: TowerHuntConfig, prune: bool) -> dict:
    times, nodes = [], []
    for state in positions:
        engine = MinimaxSearchEngine(config, prune=prune)
        start = time.perf_counter()
        engine.search(state)
        times.append(time.perf_counter() - start)
        nodes.append(engine.stats.nodes)
    return {"mean_time": float(np.mean(times)), "max_time": float(np.max(times)),
            "mean_nodes": float(np.mean(nodes))}


def main() -> None:
    args = parse_args()
    base = load_config(args.config)
    setup_logging(base.logging)

    positions = collect_positions(args.positions, args.seed, base)
    print(f"Benchmarking {len(positions)} positions")
    print("-" * 60)
    for depth in args.depths:
        config = base.model_copy(update={"search": SearchRules(max_depth=depth,
                                                               timeout_seconds=base.search.timeout_seconds)})
        pruned = benchmark_depth(positions, config, prune=True)
        print(f"depth {depth}: {pruned['mean_time']:.3f}s mean, {pruned['max_time']:.3f}s max, "
              f"{pruned['mean_nodes']:.0f} nodes")
        if pruned["max_time"] > base.search.timeout_seconds:
            logger.warning("depth %d exceeds the %.0fs move deadline", depth, base.search.timeout_seconds)
        if args.compare:
            full = benchmark_depth(positions, config, prune=False)
            saved = 100.0 * (1 - pruned["mean_nodes"] / full["mean_nodes"])
            print(f"         unpruned {full['mean_time']:.3f}s mean, "
                  f"{full['mean_nodes']:.0f} nodes ({saved:.1f}% saved by pruning)")


if __name__ == "__main__":
    main()
