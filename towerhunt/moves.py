from __future__ import annotations

from typing import List, Optional, Tuple

from towerhunt.types import (
    COLUMNS,
    Cell,
    CellId,
    GameState,
    MovePair,
    Player,
)

# Column offsets for lateral moves, in check order: left-1, left-2, right-1, right-2.
# Columns wrap around the board edge.
_LATERAL_OFFSETS: Tuple[int, ...] = (-1, -2, 1, 2)


class MoveGenerator:
    """Generates legal moves for a given state and player.

    Vertical candidates are one and two rows along the tower's direction.
    Lateral candidates are one and two columns to either side, wrapped
    modulo the board width, and only while the player is not under the
    lateral move lock. A candidate is legal if its top owner differs from
    the source's top owner.
    """

    def local_moves(self, state: GameState, cell: Cell, player: Player) -> List[Cell]:
        owner = cell.top
        if owner is None:
            return []
        targets: List[Cell] = []
        for step in (1, 2):
            nb: Optional[Cell] = state.cell_at(cell.row + step * cell.direction, cell.column)
            if nb is not None and nb.top != owner:
                targets.append(nb)
        if not player.last_move_was_lateral:
            for offset in _LATERAL_OFFSETS:
                nb = state.cells[cell.row * COLUMNS + (cell.column + offset) % COLUMNS]
                if nb.top != owner:
                    targets.append(nb)
        return targets

    def legal_moves(self, state: GameState, player: Player) -> List[MovePair]:
        moves: List[MovePair] = []
        for cell in state.cells:
            if cell.stack and cell.stack[-1] == player.id:
                src = cell.id
                for tgt in self.local_moves(state, cell, player):
                    moves.append((src, tgt.id))
        return moves


class MoveValidator:
    """Validates moves against generated legal moves."""

    @staticmethod
    def is_lateral(src_id: CellId, tgt_id: CellId) -> bool:
        return src_id // COLUMNS == tgt_id // COLUMNS

    @staticmethod
    def validate(state: GameState, src_id: CellId, tgt_id: CellId) -> bool:
        """True iff (src, tgt) is a legal move for the player holding the turn."""
        player = state.current_player()
        if player is None:
            return False
        return (src_id, tgt_id) in MoveGenerator().legal_moves(state, player)


# Convenience functional API
_generator = MoveGenerator()


def legal_moves(cell: Cell, player: Player, state: GameState) -> List[Cell]:
    """Targets reachable from ``cell`` for ``player``, in check order."""
    return _generator.local_moves(state, cell, player)


def all_moves(state: GameState, player: Player) -> List[MovePair]:
    """All (source, target) pairs for ``player`` in board order, then target order."""
    return _generator.legal_moves(state, player)
