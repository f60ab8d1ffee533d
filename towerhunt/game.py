"""
Live game loop without any UI: user move, win check, bot move, win check.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from towerhunt.config import TowerHuntConfig
from towerhunt.engine import find_best_move_with_timeout
from towerhunt.errors import InvalidInvocation, InvalidMove, SearchTimeout
from towerhunt.moves import MoveValidator, all_moves
from towerhunt.rules import apply_move_and_turn, check_win, undo_move
from towerhunt.types import CellId, GameState, Move, MovePair, PlayerId, create_initial_state

logger = logging.getLogger(__name__)

SearchFn = Callable[[GameState, TowerHuntConfig], MovePair]


class GameSession:
    """Manages the board, both players and the move history of one game."""

    def __init__(self, config: Optional[TowerHuntConfig] = None,
                 search: Optional[SearchFn] = None) -> None:
        self.config = config or TowerHuntConfig()
        self.search: SearchFn = search or find_best_move_with_timeout
        self.state: GameState = create_initial_state()
        self.history: List[Move] = []
        self.game_over = False
        self.winner: Optional[PlayerId] = None

    def reset(self) -> None:
        """Reset the game to the opening position, user to move."""
        self.state = create_initial_state()
        self.history.clear()
        self.game_over = False
        self.winner = None

    @property
    def move_number(self) -> int:
        return len(self.history) + 1

    def is_user_turn(self) -> bool:
        return self.state.player(PlayerId.USER).has_turn

    def user_moves(self) -> List[MovePair]:
        return all_moves(self.state, self.state.player(PlayerId.USER))

    def play_user_move(self, src: CellId, tgt: CellId) -> bool:
        """Apply the user's move; return True if it ended the game."""
        if self.game_over:
            raise InvalidInvocation("the game is over")
        if not self.is_user_turn():
            raise InvalidInvocation("it is not the user's turn")
        if not MoveValidator.validate(self.state, src, tgt):
            raise InvalidMove(f"illegal move {src} -> {tgt}")
        return self._play(PlayerId.USER, src, tgt)

    def play_bot_move(self) -> Optional[MovePair]:
        """
        Let the bot search and play its move.

        Returns the move played, or None when the search timed out; in that
        case the game is reset, as there is no move to fall back on.
        """
        if self.game_over:
            raise InvalidInvocation("the game is over")
        bot = self.state.player(PlayerId.BOT)
        if not bot.has_turn:
            raise InvalidInvocation("it is not the bot's turn")
        if not all_moves(self.state, bot):
            logger.info("bot has no legal move; user wins")
            self._finish(PlayerId.USER)
            return None
        try:
            move = self.search(self.state.copy(), self.config)
        except SearchTimeout:
            logger.warning("bot search timed out; resetting game")
            self.reset()
            return None
        src, tgt = move
        if not MoveValidator.validate(self.state, src, tgt):
            raise InvalidMove(f"search returned illegal move {src} -> {tgt}")
        self._play(PlayerId.BOT, src, tgt)
        if not self.game_over and not self.user_moves():
            logger.info("user has no legal move; bot wins")
            self._finish(PlayerId.BOT)
        return (src, tgt)

    def undo(self) -> bool:
        """Take back the last move; return False if there is none."""
        if not self.history:
            return False
        undo_move(self.state, self.history.pop())
        self.game_over = False
        self.winner = None
        return True

    def _play(self, pid: PlayerId, src: CellId, tgt: CellId) -> bool:
        record = apply_move_and_turn(self.state, src, tgt, self.config.winning.max_stack_size)
        self.history.append(record)
        logger.debug("move %d: %s %d -> %d", len(self.history), pid.value, src, tgt)
        if check_win(self.state, self.state.player(pid), self.config):
            self._finish(pid)
        return self.game_over

    def _finish(self, pid: PlayerId) -> None:
        self.state.player(pid).is_winner = True
        self.game_over = True
        self.winner = pid
        logger.info("game over after %d moves: %s wins", len(self.history), pid.value)
