"""
dg_config.py

Pacing configuration for the mini-games. Every delay is expressed in seconds
and only affects when feedback becomes visible; the game rules never depend
on it.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class GameTimings:
    """
    Delays used to pace a game session.

    Attributes:
        coin_flip: Time the coin spins before the guess is resolved.
        hand_reveal: Time the opponent's hand is "shuffled" before it shows.
        opponent_think: Pause before the board opponent places its mark.
        coin_result: Pause between the last coin round and the terminal signal.
        hand_result: Same, for the hand game.
        board_result: Same, for the board game.
        restart: Pause between a lost game and the next one.
    """
    coin_flip: float = 0.8
    hand_reveal: float = 0.9
    opponent_think: float = 0.6
    coin_result: float = 1.0
    hand_result: float = 1.2
    board_result: float = 1.2
    restart: float = 0.5

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"Timing '{f.name}' cannot be negative.")

    @classmethod
    def instant(cls) -> "GameTimings":
        """Returns timings with every delay set to zero."""
        return cls(**{f.name: 0.0 for f in fields(cls)})

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "GameTimings":
        """
        Builds timings from a loosely-typed mapping, e.g. parsed from a
        settings file. Missing keys keep their defaults.

        Args:
            values (Mapping[str, Any]): Delay names mapped to numbers or
                numeric strings.

        Returns:
            GameTimings: The resulting configuration.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown timing(s): {', '.join(sorted(unknown))}.")
        coerced = {}
        for name, value in values.items():
            try:
                coerced[name] = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Timing '{name}' must be a number, got {value!r}.") from None
        return cls(**coerced)

    def scaled(self, factor: float) -> "GameTimings":
        """Returns a copy with every delay multiplied by `factor`."""
        if factor < 0:
            raise ValueError("Scale factor cannot be negative.")
        return replace(self, **{f.name: getattr(self, f.name) * factor for f in fields(self)})
