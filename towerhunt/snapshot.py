"""
Serialisable snapshot of a GameState.

This is the shape an outer layer (worker messaging, persistence, UI) hands to
the engine and gets back. The encoding is up to that layer; the models below
only validate field meaning and the board invariants.
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator

from towerhunt.types import (
    CELLS,
    COLUMNS,
    MAX_COUNTER,
    ROWS,
    Cell,
    GameState,
    Player,
    PlayerId,
    Vault,
    is_valid_direction,
)


class VaultSnapshot(BaseModel):
    own: int = Field(default=0, ge=0, le=MAX_COUNTER)
    opponent: int = Field(default=0, ge=0, le=MAX_COUNTER)


class CellSnapshot(BaseModel):
    row: int = Field(ge=0, lt=ROWS)
    column: int = Field(ge=0, lt=COLUMNS)
    stack: List[PlayerId] = Field(default_factory=list)
    direction: int = 0
    reversed: bool = False

    @field_validator('direction')
    @classmethod
    def validate_direction(cls, v):
        if not is_valid_direction(v):
            raise ValueError("direction must be -1, 0 or 1")
        return v

    @model_validator(mode='after')
    def check_tower_invariants(self):
        if (self.direction == 0) != (not self.stack):
            raise ValueError(f"cell ({self.row}, {self.column}): direction must be 0 exactly when the stack is empty")
        if self.reversed and not self.stack:
            raise ValueError(f"cell ({self.row}, {self.column}): an empty cell cannot be reversed")
        return self

    @property
    def id(self) -> int:
        return self.row * COLUMNS + self.column


class PlayerSnapshot(BaseModel):
    id: PlayerId
    is_maximizing: bool
    has_turn: bool = False
    last_move_was_lateral: bool = False
    towers_secured: int = Field(default=0, ge=0, le=MAX_COUNTER)
    vault: VaultSnapshot = Field(default_factory=VaultSnapshot)
    is_winner: bool = False


class BoardSnapshot(BaseModel):
    cells: List[CellSnapshot]
    players: List[PlayerSnapshot]

    @model_validator(mode='after')
    def check_board(self):
        ids = {c.id for c in self.cells}
        if len(self.cells) != CELLS or len(ids) != CELLS:
            raise ValueError(f"board must hold {CELLS} distinct cells")
        if len(self.players) != 2 or {p.id for p in self.players} != set(PlayerId):
            raise ValueError("board must hold exactly one user and one bot player")
        if sum(p.is_maximizing for p in self.players) != 1:
            raise ValueError("exactly one player must be maximizing")
        if sum(p.has_turn for p in self.players) > 1:
            raise ValueError("at most one player may hold the turn")
        return self

    @classmethod
    def from_state(cls, state: GameState) -> 'BoardSnapshot':
        return cls(
            cells=[
                CellSnapshot(row=c.row, column=c.column, stack=list(c.stack),
                             direction=c.direction, reversed=c.reversed)
                for c in state.cells
            ],
            players=[
                PlayerSnapshot(
                    id=p.id,
                    is_maximizing=p.is_maximizing,
                    has_turn=p.has_turn,
                    last_move_was_lateral=p.last_move_was_lateral,
                    towers_secured=p.towers_secured,
                    vault=VaultSnapshot(own=p.vault.own, opponent=p.vault.opponent),
                    is_winner=p.is_winner,
                )
                for p in state.players
            ],
        )

    def to_state(self) -> GameState:
        cells = [
            Cell(c.row, c.column, list(c.stack), c.direction, c.reversed)
            for c in sorted(self.cells, key=lambda c: c.id)
        ]
        players = [
            Player(
                id=p.id,
                is_maximizing=p.is_maximizing,
                has_turn=p.has_turn,
                last_move_was_lateral=p.last_move_was_lateral,
                towers_secured=p.towers_secured,
                vault=Vault(p.vault.own, p.vault.opponent),
                is_winner=p.is_winner,
            )
            for p in self.players
        ]
        return GameState(cells, players)
