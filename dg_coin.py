"""
dg_coin.py

Heads or tails, best of three. The coin is biased toward the player's guess
by the pity bonus: at a loss streak of 4 or more a guess is right 90% of the
time.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from dg_config import GameTimings
from dg_difficulty import coin_win_chance
from dg_scheduling import AsyncioScheduler, Pacer, Scheduler
from dg_session import FinishCallback, GameSession, GameStatus, GameVariant

log = logging.getLogger(__name__)

ROUNDS_TO_DECIDE = 2


class CoinSide(Enum):
    HEADS = "heads"
    TAILS = "tails"

    @property
    def opposite(self) -> "CoinSide":
        return CoinSide.TAILS if self is CoinSide.HEADS else CoinSide.HEADS


@dataclass(frozen=True)
class CoinRound:
    guess: CoinSide
    actual: CoinSide
    correct: bool


def flip_coin(guess: CoinSide, win_chance: float, rng: random.Random) -> CoinSide:
    """Returns the side that lands: the guess with probability `win_chance`."""
    if rng.random() < win_chance:
        return guess
    return guess.opposite


class CoinGuessGame:
    """
    A best-of-three coin guessing game. Two correct guesses win, two wrong
    guesses lose, so two or three rounds are played.
    """
    variant = GameVariant.COIN_GUESS

    def __init__(self, loss_streak: int, on_finish: Optional[FinishCallback] = None,
                 rng: Optional[random.Random] = None, scheduler: Optional[Scheduler] = None,
                 timings: Optional[GameTimings] = None):
        self.loss_streak = loss_streak
        self.win_chance = coin_win_chance(loss_streak)
        self.session = GameSession(self.variant)
        self._on_finish = on_finish
        self._rng = rng or random.Random()
        self._timings = timings or GameTimings()
        self._pacer = Pacer(scheduler or AsyncioScheduler())

    @property
    def status(self) -> GameStatus:
        return self.session.status

    @property
    def accepts_input(self) -> bool:
        return self.session.accepts_input and not self._pacer.closed

    @property
    def correct(self) -> int:
        return self.session.count(lambda r: r.correct)

    @property
    def incorrect(self) -> int:
        return self.session.count(lambda r: not r.correct)

    @property
    def last_round(self) -> Optional[CoinRound]:
        rounds = self.session.rounds
        return rounds[-1] if rounds else None

    def start(self) -> None:
        log.info("Coin guess started, win chance %.0f%%", self.win_chance * 100)

    def guess(self, side: Union[CoinSide, str]) -> bool:
        """
        Guesses the side of the next flip. The flip resolves after a short
        spin; until then further guesses are ignored.

        Returns:
            bool: True if the guess was accepted.
        """
        if not self.accepts_input:
            log.debug("Ignoring guess %r: coin busy or game over", side)
            return False
        try:
            side = CoinSide(side)
        except ValueError:
            log.debug("Ignoring unknown coin side %r", side)
            return False

        # Scheduling may raise; the session changes only once it succeeded
        self._pacer.later(self._timings.coin_flip, lambda: self._resolve(side))
        self.session.busy = True
        return True

    def handle_input(self, move) -> bool:
        return self.guess(move)

    def _resolve(self, side: CoinSide):
        actual = flip_coin(side, self.win_chance, self._rng)
        outcome = CoinRound(guess=side, actual=actual, correct=actual is side)
        self.session.record(outcome)
        self.session.busy = False
        log.info("Coin landed %s (guessed %s)", actual.value, side.value)

        if self.correct >= ROUNDS_TO_DECIDE:
            self._finish(GameStatus.PLAYER_WIN)
        elif self.incorrect >= ROUNDS_TO_DECIDE:
            self._finish(GameStatus.PLAYER_LOSS)

    def _finish(self, status: GameStatus):
        if self._on_finish is not None:
            self._pacer.later(self._timings.coin_result, lambda: self._on_finish(self, status))
        self.session.conclude(status)

    def close(self) -> None:
        """Cancels pending timers. The game reports nothing after this."""
        self._pacer.close()
