"""
helpers.py

Shared test doubles: a random source whose draws are scripted, so a test can
decide exactly how each coin lands or which sign the opponent throws, and a
scheduler that can be made to fail.
"""

import random
from typing import Any, Iterable, Optional

from dg_scheduling import ManualScheduler


class ScriptedRandom:
    """
    Stands in for random.Random. `random()` returns the scripted draws in
    order; `choice()` returns scripted picks first, then falls back to a
    seeded generator.
    """
    def __init__(self, draws: Iterable[float] = (), choices: Iterable[Any] = (), seed: int = 0):
        self.draws = list(draws)
        self.choices = list(choices)
        self._fallback = random.Random(seed)

    def random(self) -> float:
        if not self.draws:
            raise AssertionError("Test ran out of scripted random draws.")
        return self.draws.pop(0)

    def choice(self, seq):
        if self.choices:
            picked = self.choices.pop(0)
            assert picked in seq, f"Scripted choice {picked!r} not among {list(seq)!r}"
            return picked
        return self._fallback.choice(seq)

    def push(self, *draws: float, choice: Optional[Any] = None):
        self.draws.extend(draws)
        if choice is not None:
            self.choices.append(choice)


class FlakyScheduler(ManualScheduler):
    """A ManualScheduler that refuses to schedule while `failing` is set."""
    def __init__(self):
        super().__init__()
        self.failing = False

    def call_later(self, delay, callback):
        if self.failing:
            raise RuntimeError("Scheduler unavailable.")
        return super().call_later(delay, callback)
