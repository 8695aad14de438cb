"""
dg_tictactoe.py

Tic-tac-toe against a search-driven opponent. The player (X) must complete
a line to win: a full board without a line is a loss, not a draw. The pity
bonus makes the opponent play its best move less often, from 70% of the time
down to 30%.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from dg_board import Board, Mark
from dg_config import GameTimings
from dg_difficulty import optimal_move_chance
from dg_scheduling import AsyncioScheduler, Pacer, Scheduler
from dg_search import GameTreeSearch
from dg_session import FinishCallback, GameSession, GameStatus, GameVariant

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardMove:
    cell: int
    mark: Mark


class BoardGame:
    """
    One game of tic-tac-toe. The player moves first; after each player move
    the opponent answers following a short pause.
    """
    variant = GameVariant.BOARD_GAME

    def __init__(self, loss_streak: int, on_finish: Optional[FinishCallback] = None,
                 rng: Optional[random.Random] = None, scheduler: Optional[Scheduler] = None,
                 timings: Optional[GameTimings] = None, search: Optional[GameTreeSearch] = None):
        """
        Args:
            loss_streak (int): Consecutive losses before this game.
            on_finish (Optional[FinishCallback]): Called with the game and its
                terminal status once the result has been shown.
            rng (Optional[random.Random]): Source of randomness.
            scheduler (Optional[Scheduler]): Timer source for pacing.
            timings (Optional[GameTimings]): Pacing delays.
            search (Optional[GameTreeSearch]): Opponent move picker. If None,
                one is built from the pity-adjusted optimal chance.
        """
        self.loss_streak = loss_streak
        self.board = Board()
        self.turn = Mark.PLAYER
        self.session = GameSession(self.variant)
        self._on_finish = on_finish
        self._rng = rng or random.Random()
        self._timings = timings or GameTimings()
        self._pacer = Pacer(scheduler or AsyncioScheduler())
        self.search = search or GameTreeSearch(optimal_move_chance(loss_streak), self._rng)

    @property
    def status(self) -> GameStatus:
        return self.session.status

    @property
    def accepts_input(self) -> bool:
        return self.session.accepts_input and self.turn is Mark.PLAYER and not self._pacer.closed

    @property
    def is_draw(self) -> bool:
        """True when the game ended on a full board with no line."""
        return self.session.is_over and self.board.winner() is None

    def start(self) -> None:
        log.info("Board game started, opponent optimal %.0f%% of the time", self.search.optimal_chance * 100)

    def play(self, cell: int) -> bool:
        """
        Places the player's mark on `cell` (0..8).

        Returns:
            bool: True if the move was accepted.
        """
        if not self.accepts_input:
            log.debug("Ignoring cell %r: not the player's turn or game over", cell)
            return False
        if isinstance(cell, bool) or not isinstance(cell, int) or not self.board.is_free(cell):
            log.debug("Ignoring cell %r: off the board or taken", cell)
            return False

        self._apply(cell, Mark.PLAYER)
        return True

    def handle_input(self, move) -> bool:
        return self.play(move)

    def _opponent_turn(self):
        self._apply(self.search.choose_move(self.board), Mark.OPPONENT)

    def _apply(self, cell: int, mark: Mark):
        """
        Plays `cell` for `mark` and hands the turn over or ends the game.
        The follow-up timer is scheduled on a copy of the board first, so a
        failing scheduler leaves the game untouched.
        """
        after = self.board.copy()
        after.place(cell, mark)
        status = self._end_status(after, mark)
        if status is None:
            if mark is Mark.PLAYER:
                self._pacer.later(self._timings.opponent_think, self._opponent_turn)
        elif self._on_finish is not None:
            self._pacer.later(self._timings.board_result, lambda: self._on_finish(self, status))

        self.board.place(cell, mark)
        self.session.record(BoardMove(cell, mark))
        log.info("%s takes cell %d", mark.value, cell)
        if status is not None:
            self.session.conclude(status)
        elif mark is Mark.PLAYER:
            self.turn = Mark.OPPONENT
            self.session.busy = True
        else:
            self.turn = Mark.PLAYER
            self.session.busy = False

    def _end_status(self, board: Board, mover: Mark) -> Optional[GameStatus]:
        """The terminal status after `mover` played on `board`, if the game is over."""
        if board.winner() is mover:
            return GameStatus.PLAYER_WIN if mover is Mark.PLAYER else GameStatus.PLAYER_LOSS
        if board.is_full():
            # A draw counts against the player
            return GameStatus.PLAYER_LOSS
        return None

    def close(self) -> None:
        self._pacer.close()
