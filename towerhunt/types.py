"""
Type definitions and the board model for the TowerHunt engine.

This module provides:
- Player identifiers and type aliases for cells and moves
- Dataclasses for cells, players and the undo record of a move
- The mutable GameState owning all 36 cells and both players
- The protocol evaluators implement for the search

No game rules live here; see ``towerhunt.moves`` and ``towerhunt.rules``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

import numpy as np


class PlayerId(str, Enum):
    """Fixed tokens identifying both sides. Stones carry these as owners."""

    USER = "user"
    BOT = "bot"


# Basic type aliases
CellId = int                       # row * 6 + column
Stack = List[PlayerId]             # bottom to top
MovePair = Tuple[CellId, CellId]   # (source id, target id)
Score = float
GameResult = Tuple[Score, Optional[MovePair]]
SnapshotDict = Dict[str, Any]

# Board geometry
ROWS: int = 6
COLUMNS: int = 6
CELLS: int = ROWS * COLUMNS

# Counters (secured towers, vault slots) never exceed this value
MAX_COUNTER: int = 6

# Home rows: towers start here and are secured here after a round trip
USER_HOME_ROW: int = 0
BOT_HOME_ROW: int = ROWS - 1

# Marks used by the numpy ownership grid
BOT_MARK: int = 1
USER_MARK: int = -1
EMPTY_MARK: int = 0


def cell_id(row: int, column: int) -> CellId:
    return row * COLUMNS + column


@dataclass
class Cell:
    """A single grid cell holding a (possibly empty) tower.

    ``direction`` is 0 exactly when the stack is empty. ``reversed`` (the
    "dot") marks a tower that reached the far edge and now heads home.
    """

    row: int
    column: int
    stack: Stack = field(default_factory=list)
    direction: int = 0
    reversed: bool = False

    @property
    def id(self) -> CellId:
        return cell_id(self.row, self.column)

    @property
    def top(self) -> Optional[PlayerId]:
        return self.stack[-1] if self.stack else None

    @property
    def is_empty(self) -> bool:
        return not self.stack

    def clear(self) -> None:
        self.stack = []
        self.direction = 0
        self.reversed = False

    def restore(self, other: Cell) -> None:
        """Copy the mutable fields of ``other`` into this cell."""
        self.stack = list(other.stack)
        self.direction = other.direction
        self.reversed = other.reversed

    def copy(self) -> Cell:
        return Cell(self.row, self.column, list(self.stack), self.direction, self.reversed)


@dataclass
class Vault:
    """Stones removed from the bottom of oversized stacks, credited to a player."""

    own: int = 0
    opponent: int = 0

    def credit(self, own_stone: bool) -> None:
        if own_stone:
            self.own = min(MAX_COUNTER, self.own + 1)
        else:
            self.opponent = min(MAX_COUNTER, self.opponent + 1)

    def copy(self) -> Vault:
        return Vault(self.own, self.opponent)


@dataclass(frozen=True)
class PlayerRecord:
    """The mutable fields of a player, frozen at one point in time."""

    has_turn: bool
    last_move_was_lateral: bool
    towers_secured: int
    vault_own: int
    vault_opponent: int
    is_winner: bool


@dataclass
class Player:
    id: PlayerId
    is_maximizing: bool = False
    has_turn: bool = False
    last_move_was_lateral: bool = False
    towers_secured: int = 0
    vault: Vault = field(default_factory=Vault)
    is_winner: bool = False

    def secure_tower(self) -> None:
        self.towers_secured = min(MAX_COUNTER, self.towers_secured + 1)

    def record(self) -> PlayerRecord:
        return PlayerRecord(
            has_turn=self.has_turn,
            last_move_was_lateral=self.last_move_was_lateral,
            towers_secured=self.towers_secured,
            vault_own=self.vault.own,
            vault_opponent=self.vault.opponent,
            is_winner=self.is_winner,
        )

    def restore(self, rec: PlayerRecord) -> None:
        self.has_turn = rec.has_turn
        self.last_move_was_lateral = rec.last_move_was_lateral
        self.towers_secured = rec.towers_secured
        self.vault = Vault(rec.vault_own, rec.vault_opponent)
        self.is_winner = rec.is_winner

    def copy(self) -> Player:
        return Player(
            id=self.id,
            is_maximizing=self.is_maximizing,
            has_turn=self.has_turn,
            last_move_was_lateral=self.last_move_was_lateral,
            towers_secured=self.towers_secured,
            vault=self.vault.copy(),
            is_winner=self.is_winner,
        )


@dataclass(frozen=True)
class Move:
    """Undo record: both touched cells and both players, as they were before the move."""

    src_id: CellId
    tgt_id: CellId
    src_cell: Cell
    tgt_cell: Cell
    players: Dict[PlayerId, PlayerRecord]

    @property
    def pair(self) -> MovePair:
        return (self.src_id, self.tgt_id)


class GameState:
    """
    Mutable state of one game: 36 cells indexed by cell id plus both players.

    A GameState is mutated in place by move application and undo. The search
    always works on its own copy, see ``GameState.copy``.
    """

    def __init__(self, cells: List[Cell], players: List[Player]) -> None:
        if len(cells) != CELLS:
            raise ValueError(f"Board must hold exactly {CELLS} cells")
        for idx, cell in enumerate(cells):
            if cell.id != idx:
                raise ValueError(f"Cell at index {idx} has id {cell.id}")
        if len(players) != 2 or players[0].id == players[1].id:
            raise ValueError("GameState needs exactly one user and one bot player")
        self.cells: List[Cell] = cells
        self.players: List[Player] = players
        self._by_id: Dict[PlayerId, Player] = {p.id: p for p in players}

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return self.cells == other.cells and self.players == other.players

    def __repr__(self) -> str:
        cur = self.current_player()
        return f"GameState(turn={cur.id.value if cur else None}, towers={sum(1 for c in self.cells if c.stack)})"

    # Players
    def player(self, pid: PlayerId) -> Player:
        return self._by_id[pid]

    def opponent(self, pid: PlayerId) -> Player:
        return self._by_id[PlayerId.BOT if pid == PlayerId.USER else PlayerId.USER]

    def current_player(self) -> Optional[Player]:
        for p in self.players:
            if p.has_turn:
                return p
        return None

    def maximizer(self) -> Player:
        return next(p for p in self.players if p.is_maximizing)

    def minimizer(self) -> Player:
        return next(p for p in self.players if not p.is_maximizing)

    # Cells
    def cell(self, idx: CellId) -> Cell:
        return self.cells[idx]

    def cell_at(self, row: int, column: int) -> Optional[Cell]:
        if 0 <= row < ROWS and 0 <= column < COLUMNS:
            return self.cells[cell_id(row, column)]
        return None

    def towers_of(self, pid: PlayerId) -> List[Cell]:
        return [c for c in self.cells if c.stack and c.stack[-1] == pid]

    def has_towers(self, pid: PlayerId) -> bool:
        return any(c.stack and c.stack[-1] == pid for c in self.cells)

    # numpy views for the evaluator
    def ownership_grid(self) -> np.ndarray:
        """6x6 int8 grid: BOT_MARK / USER_MARK for the top owner, 0 for empty."""
        marks = [
            BOT_MARK if c.stack and c.stack[-1] == PlayerId.BOT
            else USER_MARK if c.stack else EMPTY_MARK
            for c in self.cells
        ]
        return np.array(marks, dtype=np.int8).reshape(ROWS, COLUMNS)

    def reversed_grid(self) -> np.ndarray:
        return np.array([c.reversed for c in self.cells], dtype=bool).reshape(ROWS, COLUMNS)

    def copy(self) -> GameState:
        return GameState([c.copy() for c in self.cells], [p.copy() for p in self.players])

    def __deepcopy__(self, memo: Dict[int, Any]) -> GameState:
        return self.copy()

    # Snapshot contract (see towerhunt.snapshot)
    def to_snapshot(self) -> SnapshotDict:
        # Local import to avoid circular import during module initialization
        from towerhunt.snapshot import BoardSnapshot

        return BoardSnapshot.from_state(self).model_dump(mode="json")

    @classmethod
    def from_snapshot(cls, data: SnapshotDict) -> GameState:
        from towerhunt.snapshot import BoardSnapshot

        return BoardSnapshot.model_validate(data).to_state()


class PositionEvaluatorProtocol(Protocol):
    """Protocol for static position evaluation functions."""

    def evaluate(self, state: GameState) -> Score:
        """Heuristic score; positive favours the maximizing player."""
        ...


# Factory functions
def create_empty_state(user_to_move: bool = True) -> GameState:
    """An empty board with both players; the bot is the maximizing side."""
    cells = [Cell(r, c) for r in range(ROWS) for c in range(COLUMNS)]
    players = [
        Player(PlayerId.BOT, is_maximizing=True, has_turn=not user_to_move),
        Player(PlayerId.USER, is_maximizing=False, has_turn=user_to_move),
    ]
    return GameState(cells, players)


def create_initial_state() -> GameState:
    """Opening position: user on rows 0-1 moving down, bot on rows 4-5 moving up, user first."""
    state = create_empty_state(user_to_move=True)
    for cell in state.cells:
        if cell.row <= USER_HOME_ROW + 1:
            cell.stack = [PlayerId.USER]
            cell.direction = 1
        elif cell.row >= BOT_HOME_ROW - 1:
            cell.stack = [PlayerId.BOT]
            cell.direction = -1
    return state


def place_tower(state: GameState, row: int, column: int, stack: Stack,
                direction: Optional[int] = None, reversed: bool = False) -> Cell:
    """Put a tower on a cell. Direction defaults to the top owner's forward direction."""
    cell = state.cell_at(row, column)
    if cell is None:
        raise ValueError(f"({row}, {column}) is off the board")
    cell.stack = list(stack)
    if not stack:
        cell.direction = 0
        cell.reversed = False
        return cell
    if direction is None:
        direction = forward_direction(stack[-1])
        if reversed:
            direction = -direction
    cell.direction = direction
    cell.reversed = reversed
    return cell


def forward_direction(pid: PlayerId) -> int:
    return 1 if pid == PlayerId.USER else -1


# Utility functions for type checking
def is_valid_cell_id(idx: Any) -> bool:
    return isinstance(idx, int) and 0 <= idx < CELLS


def is_valid_direction(value: Any) -> bool:
    return value in (-1, 0, 1)
