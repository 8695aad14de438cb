"""
dg_session.py

This module provides the GameSession class, which holds the state and round
history of a single attempt at a mini-game, together with the enums and the
interface shared by all games.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Protocol, Tuple

log = logging.getLogger(__name__)

class GameVariant(Enum):
    """The mini-games a popup can pick from."""
    COIN_GUESS = 1
    HAND_GAME = 2
    BOARD_GAME = 3

class GameStatus(Enum):
    """Represents the current status of a game, from the player's side."""
    IN_PROGRESS = 1
    PLAYER_WIN = 2
    PLAYER_LOSS = 3 # Includes board-game draws

FinishCallback = Callable[["MiniGame", GameStatus], None]

class GameSession:
    """
    Holds the rounds played in one attempt. A session is never reused: a
    retry gets a fresh game and with it a fresh session.
    """
    def __init__(self, variant: GameVariant):
        """
        Args:
            variant (GameVariant): The game this session belongs to.
        """
        self.variant = variant
        self._rounds: List[Any] = []
        self.status: GameStatus = GameStatus.IN_PROGRESS
        # True while a round is being resolved (coin spinning, opponent thinking)
        self.busy = False

    @property
    def rounds(self) -> Tuple[Any, ...]:
        """Returns the recorded round outcomes in play order."""
        return tuple(self._rounds)

    @property
    def is_over(self) -> bool:
        return self.status != GameStatus.IN_PROGRESS

    @property
    def accepts_input(self) -> bool:
        return not self.busy and not self.is_over

    def record(self, outcome: Any):
        """Appends a round outcome to the history."""
        if self.is_over:
            raise RuntimeError("Cannot record a round after the game has concluded.")
        self._rounds.append(outcome)

    def count(self, predicate: Callable[[Any], bool]) -> int:
        """Counts the recorded rounds matching `predicate`."""
        return sum(1 for outcome in self._rounds if predicate(outcome))

    def conclude(self, status: GameStatus):
        """Moves the session to its terminal status. Allowed exactly once."""
        if status == GameStatus.IN_PROGRESS:
            raise ValueError("A session can only conclude with a win or a loss.")
        if self.is_over:
            raise RuntimeError(f"Session already concluded with {self.status.name}.")
        self.status = status
        self.busy = False
        log.info("%s concluded after %d round(s): %s", self.variant.name, len(self._rounds), status.name)

class MiniGame(Protocol):
    """
    The capability set every game offers. The controller only relies on this
    interface, never on a concrete game type.
    """
    variant: GameVariant
    session: GameSession

    @property
    def status(self) -> GameStatus: ...

    @property
    def accepts_input(self) -> bool: ...

    def start(self) -> None: ...

    def handle_input(self, move: Any) -> bool: ...

    def close(self) -> None: ...
