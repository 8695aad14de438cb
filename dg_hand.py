"""
dg_hand.py

Rock, paper, scissors against the computer, first to two round wins. With a
positive loss streak the opponent sometimes throws, on purpose, the sign the
player's choice beats.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from dg_config import GameTimings
from dg_difficulty import pity_bonus
from dg_scheduling import AsyncioScheduler, Pacer, Scheduler
from dg_session import FinishCallback, GameSession, GameStatus, GameVariant

log = logging.getLogger(__name__)

WINS_TO_DECIDE = 2


class HandSign(Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class RoundResult(Enum):
    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"


SIGNS = (HandSign.ROCK, HandSign.PAPER, HandSign.SCISSORS)

# The sign each key beats
BEATS: Dict[HandSign, HandSign] = {
    HandSign.ROCK: HandSign.SCISSORS,
    HandSign.PAPER: HandSign.ROCK,
    HandSign.SCISSORS: HandSign.PAPER,
}


@dataclass(frozen=True)
class HandRound:
    player_sign: HandSign
    opponent_sign: HandSign
    result: RoundResult


def decide_round(player_sign: HandSign, opponent_sign: HandSign) -> RoundResult:
    """Standard precedence, from the player's point of view."""
    if player_sign is opponent_sign:
        return RoundResult.DRAW
    if BEATS[player_sign] is opponent_sign:
        return RoundResult.WIN
    return RoundResult.LOSE


def pick_opponent_sign(player_sign: HandSign, bonus: float, rng: random.Random) -> HandSign:
    """
    Chooses the opponent's sign. With probability `bonus` the opponent is
    forced to the sign the player beats; otherwise it picks uniformly, which
    can still land on the losing sign.
    """
    if rng.random() < bonus:
        return BEATS[player_sign]
    return rng.choice(SIGNS)


class HandGame:
    """
    Best of three on wins only: draws use up a round but count for nobody.
    """
    variant = GameVariant.HAND_GAME

    def __init__(self, loss_streak: int, on_finish: Optional[FinishCallback] = None,
                 rng: Optional[random.Random] = None, scheduler: Optional[Scheduler] = None,
                 timings: Optional[GameTimings] = None):
        self.loss_streak = loss_streak
        self.bonus = pity_bonus(loss_streak)
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
    def player_wins(self) -> int:
        return self.session.count(lambda r: r.result is RoundResult.WIN)

    @property
    def opponent_wins(self) -> int:
        return self.session.count(lambda r: r.result is RoundResult.LOSE)

    @property
    def last_round(self) -> Optional[HandRound]:
        rounds = self.session.rounds
        return rounds[-1] if rounds else None

    def start(self) -> None:
        log.info("Hand game started, pity bonus %.0f%%", self.bonus * 100)

    def play(self, sign: Union[HandSign, str]) -> bool:
        """
        Throws a sign. The opponent's answer is revealed after a short
        shuffle, during which further throws are ignored.

        Returns:
            bool: True if the throw was accepted.
        """
        if not self.accepts_input:
            log.debug("Ignoring throw %r: reveal pending or game over", sign)
            return False
        try:
            sign = HandSign(sign)
        except ValueError:
            log.debug("Ignoring unknown sign %r", sign)
            return False

        # Scheduling may raise; the session changes only once it succeeded
        self._pacer.later(self._timings.hand_reveal, lambda: self._resolve(sign))
        self.session.busy = True
        return True

    def handle_input(self, move) -> bool:
        return self.play(move)

    def _resolve(self, sign: HandSign):
        opponent_sign = pick_opponent_sign(sign, self.bonus, self._rng)
        outcome = HandRound(sign, opponent_sign, decide_round(sign, opponent_sign))
        self.session.record(outcome)
        self.session.busy = False
        log.info("%s vs %s: %s", sign.value, opponent_sign.value, outcome.result.value)

        if self.player_wins >= WINS_TO_DECIDE:
            self._finish(GameStatus.PLAYER_WIN)
        elif self.opponent_wins >= WINS_TO_DECIDE:
            self._finish(GameStatus.PLAYER_LOSS)

    def _finish(self, status: GameStatus):
        if self._on_finish is not None:
            self._pacer.later(self._timings.hand_result, lambda: self._on_finish(self, status))
        self.session.conclude(status)

    def close(self) -> None:
        self._pacer.close()
