"""
dg_game.py

This module provides the SessionController class, the entry point a reminder
popup talks to. It picks a random mini-game, restarts with a new random game
after every loss (carrying the loss streak, so the next game is easier), and
reports the first win to the popup exactly once.
"""

import logging
import random
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from dg_coin import CoinGuessGame
from dg_config import GameTimings
from dg_difficulty import luck_percent, pity_bonus
from dg_hand import HandGame
from dg_scheduling import AsyncioScheduler, Pacer, Scheduler
from dg_session import GameStatus, GameVariant, MiniGame
from dg_tictactoe import BoardGame

log = logging.getLogger(__name__)

GameFactory = Callable[..., MiniGame]

GAME_FACTORIES: Dict[GameVariant, GameFactory] = {
    GameVariant.COIN_GUESS: CoinGuessGame,
    GameVariant.HAND_GAME: HandGame,
    GameVariant.BOARD_GAME: BoardGame,
}

class ControllerState(Enum):
    """Lifecycle of a SessionController."""
    SELECTING = 1
    RUNNING = 2
    ATTEMPT_WON = 3
    CLOSED = 4 # The popup went away before a win

class SessionController:
    """
    Owns the loss streak across consecutive games and the single active game.
    A controller serves one popup; the next popup builds a fresh one.
    """
    def __init__(self, on_attempt_won: Callable[[], None], rng: Optional[random.Random] = None,
                 scheduler: Optional[Scheduler] = None, timings: Optional[GameTimings] = None,
                 variants: Optional[Sequence[GameVariant]] = None):
        """
        Initializes the controller and starts the first game.

        Args:
            on_attempt_won (Callable[[], None]): Called once, with no
                arguments, when the player wins a game.
            rng (Optional[random.Random]): Source of randomness shared with
                the games. Seed it for reproducible sessions.
            scheduler (Optional[Scheduler]): Timer source. Defaults to the
                running asyncio loop.
            timings (Optional[GameTimings]): Pacing delays.
            variants (Optional[Sequence[GameVariant]]): Games to pick from.
                Defaults to all of them.
        """
        self._on_attempt_won = on_attempt_won
        self._rng = rng or random.Random()
        self._scheduler = scheduler or AsyncioScheduler()
        self._timings = timings or GameTimings()
        self._variants: List[GameVariant] = list(GameVariant) if variants is None else list(variants)
        if not self._variants:
            raise ValueError("At least one game variant is required.")
        self._pacer = Pacer(self._scheduler)

        self.loss_streak = 0
        self.attempts: List[GameVariant] = []
        self.current_game: Optional[MiniGame] = None
        self.state = ControllerState.SELECTING
        self._start_game()

    @property
    def pity_bonus(self) -> float:
        return pity_bonus(self.loss_streak)

    @property
    def luck_percent(self) -> int:
        return luck_percent(self.loss_streak)

    @property
    def is_finished(self) -> bool:
        return self.state in (ControllerState.ATTEMPT_WON, ControllerState.CLOSED)

    def _start_game(self):
        if self.state != ControllerState.SELECTING:
            return
        variant = self._rng.choice(self._variants)
        factory = GAME_FACTORIES[variant]
        self.current_game = factory(
            self.loss_streak,
            on_finish=self._on_game_finished,
            rng=self._rng,
            scheduler=self._scheduler,
            timings=self._timings,
        )
        self.attempts.append(variant)
        self.state = ControllerState.RUNNING
        log.info("Attempt %d: %s (loss streak %d)", len(self.attempts), variant.name, self.loss_streak)
        self.current_game.start()

    def _on_game_finished(self, game: MiniGame, status: GameStatus):
        if self.state != ControllerState.RUNNING or game is not self.current_game:
            log.warning("Ignoring %s from %s: controller is %s", status.name, game.variant.name, self.state.name)
            return

        if status == GameStatus.PLAYER_WIN:
            self.loss_streak = 0
            self.state = ControllerState.ATTEMPT_WON
            log.info("Attempt %d won, dismissing", len(self.attempts))
            self._on_attempt_won()
        elif status == GameStatus.PLAYER_LOSS:
            self.loss_streak += 1
            self.state = ControllerState.SELECTING
            log.info("Attempt %d lost, loss streak now %d", len(self.attempts), self.loss_streak)
            self._pacer.later(self._timings.restart, self._start_game)
        else:
            raise ValueError(f"Game reported a non-terminal status: {status.name}")

    def close(self):
        """
        Tears the controller down, e.g. because the popup was closed. Pending
        timers are cancelled and nothing is reported; this is neither a win
        nor a loss.
        """
        if self.state == ControllerState.CLOSED:
            return
        self._pacer.close()
        if self.current_game is not None:
            self.current_game.close()
        self.state = ControllerState.CLOSED
        log.info("Controller closed after %d attempt(s)", len(self.attempts))
