"""
Move application, undo, turn switching and win detection.

All functions mutate the given GameState in place. ``apply_move_and_turn``
returns the undo record that ``undo_move`` consumes, so the search can walk
the tree on a single state without cloning it per node.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from towerhunt.errors import InvalidMove
from towerhunt.types import (
    BOT_HOME_ROW,
    USER_HOME_ROW,
    Cell,
    CellId,
    GameState,
    Move,
    Player,
    PlayerId,
    is_valid_cell_id,
)

if TYPE_CHECKING:
    from towerhunt.config import TowerHuntConfig

logger = logging.getLogger(__name__)


def _far_row(pid: PlayerId) -> int:
    return BOT_HOME_ROW if pid == PlayerId.USER else USER_HOME_ROW


def _home_row(pid: PlayerId) -> int:
    return USER_HOME_ROW if pid == PlayerId.USER else BOT_HOME_ROW


def stack_towers(src: Cell, tgt: Cell, player: Player, max_stack_size: int) -> None:
    """Stack the source tower onto the target, crediting overflow to ``player``'s vault.

    Source stones are pushed bottom to top. Whenever the target grows past
    ``max_stack_size`` its bottom stone leaves the board: into ``vault.own``
    if it belongs to ``player``, otherwise into ``vault.opponent``.
    """
    if not src.stack:
        raise InvalidMove(f"source cell {src.id} has no tower")
    if not tgt.stack:
        tgt.stack = list(src.stack)
        return
    if src.stack[-1] == tgt.stack[-1]:
        raise InvalidMove(f"cannot stack towers of the same player ({src.id} -> {tgt.id})")
    for stone in src.stack:
        tgt.stack.append(stone)
        if len(tgt.stack) > max_stack_size:
            player.vault.credit(tgt.stack.pop(0) == player.id)


def apply_move(src: Cell, tgt: Cell, state: GameState, max_stack_size: int) -> None:
    """Play the tower on ``src`` onto ``tgt``. Does not switch the turn."""
    if src.top is None:
        raise InvalidMove(f"source cell {src.id} has no tower")
    mover = state.player(src.top)
    src_reversed = src.reversed

    stack_towers(src, tgt, mover, max_stack_size)
    tgt.direction = src.direction
    tgt.reversed = src_reversed

    if tgt.row == _far_row(mover.id) and not src_reversed:
        tgt.direction *= -1
        tgt.reversed = True
    elif tgt.row == _home_row(mover.id) and src_reversed:
        tgt.clear()
        mover.secure_tower()
        logger.debug("%s secured a tower on cell %d (%d total)",
                     mover.id.value, tgt.id, mover.towers_secured)

    mover.last_move_was_lateral = tgt.row == src.row
    src.clear()


def switch_turn(state: GameState) -> None:
    for p in state.players:
        p.has_turn = not p.has_turn


def apply_move_and_turn(state: GameState, src_id: CellId, tgt_id: CellId, max_stack_size: int) -> Move:
    """Apply a move, switch the turn and return the record that undoes both."""
    for idx in (src_id, tgt_id):
        if not is_valid_cell_id(idx):
            raise InvalidMove(f"cell id {idx!r} is off the board")
    src = state.cells[src_id]
    tgt = state.cells[tgt_id]
    record = Move(
        src_id=src_id,
        tgt_id=tgt_id,
        src_cell=src.copy(),
        tgt_cell=tgt.copy(),
        players={p.id: p.record() for p in state.players},
    )
    apply_move(src, tgt, state, max_stack_size)
    switch_turn(state)
    return record


def undo_move(state: GameState, move: Move) -> None:
    """Restore both cells and both players exactly as they were before ``move``."""
    state.cells[move.src_id].restore(move.src_cell)
    state.cells[move.tgt_id].restore(move.tgt_cell)
    for p in state.players:
        rec = move.players.get(p.id)
        if rec is not None:
            p.restore(rec)


def check_win(state: GameState, player: Player, config: "TowerHuntConfig") -> bool:
    """
    Return True and set ``player.is_winner`` if ``player`` has won.

    A player wins when:
    - enough opponent stones sit in its vault (if that rule is enabled)
    - enough towers were secured in its safety zone
    - it is not the player's turn and either side has no tower left
    """
    rules = config.winning
    if ((rules.opponent_vault_threshold > 0
         and player.vault.opponent >= rules.opponent_vault_threshold)
            or player.towers_secured >= rules.safety_zone_count):
        player.is_winner = True
        return True
    opponent = state.opponent(player.id)
    if not player.has_turn and (not state.has_towers(opponent.id) or not state.has_towers(player.id)):
        player.is_winner = True
        return True
    return False
