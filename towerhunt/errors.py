"""Exceptions raised by the TowerHunt engine. None of them is retried internally."""
from __future__ import annotations


class TowerHuntError(Exception):
    """Base class for all engine errors."""


class InvalidMove(TowerHuntError, ValueError):
    """Illegal source or target, e.g. an empty source or stacking onto an own tower."""


class InvalidState(TowerHuntError, ValueError):
    """The board violates a data-model invariant (e.g. a reversed tower on its home row)."""


class InvalidInvocation(TowerHuntError, RuntimeError):
    """The engine was called outside its contract, e.g. searching for the minimizing side."""


class NoLegalMoves(TowerHuntError, RuntimeError):
    """The side to move has no tower with a legal target."""


class SearchTimeout(TowerHuntError, TimeoutError):
    """A deadline-bounded search did not finish in time; no move is produced."""
