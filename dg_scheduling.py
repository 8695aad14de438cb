"""
dg_scheduling.py

This module provides the timer abstraction used to pace the games. All game
logic runs on a single control flow; a delay is a scheduled callback, never a
blocking sleep, so the host can tear the engine down at any point.

Two schedulers are provided:

1.  **AsyncioScheduler**: delegates to the running asyncio event loop. This
    is what a real popup uses.
2.  **ManualScheduler**: a virtual clock that only moves when told to. Useful
    for hosts that drive their own frame loop, and for deterministic tests.
"""

import asyncio
import heapq
import itertools
import logging
from typing import Callable, List, Optional, Protocol, Tuple

log = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop (Optional[asyncio.AbstractEventLoop]): The loop to use. If
                None, the loop running at scheduling time is used.
        """
        self._loop = loop

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualTimer:
    """Handle returned by ManualScheduler.call_later."""
    def __init__(self, due: float, callback: Callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"ManualTimer(due={self.due:.3f}, {state})"


class ManualScheduler:
    """
    A scheduler driven by an explicit virtual clock. Callbacks fire in order
    of due time (ties in scheduling order) when the clock is advanced.
    """
    def __init__(self):
        self.now: float = 0.0
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> ManualTimer:
        timer = ManualTimer(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that have neither fired nor been cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Moves the clock forward and fires every timer that became due,
        including timers scheduled by those callbacks.

        Returns:
            int: The number of callbacks fired.
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards.")
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = due
            timer.callback()
            fired += 1
        self.now = target
        return fired

    def run_until_idle(self, limit: int = 10_000) -> int:
        """
        Fires timers in due order until none are left.

        Args:
            limit (int): Maximum number of callbacks to fire, guarding against
                callbacks that keep rescheduling themselves.

        Returns:
            int: The number of callbacks fired.
        """
        fired = 0
        while self._queue:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            if fired >= limit:
                raise RuntimeError(f"Scheduler still busy after {limit} callbacks.")
            self.now = max(self.now, due)
            timer.callback()
            fired += 1
        return fired


class Pacer:
    """
    Tracks the timers scheduled by one owner (a game or the controller) so
    they can all be cancelled when the owner is torn down.
    """
    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._handles: List[TimerHandle] = []
        self.closed = False

    def later(self, delay: float, callback: Callback) -> None:
        """Runs `callback` after `delay` seconds unless the pacer is closed."""
        if self.closed:
            log.debug("Pacer closed, dropping callback %r", callback)
            return

        def fire():
            self._handles.remove(handle)
            if not self.closed:
                callback()

        handle = self.scheduler.call_later(delay, fire)
        self._handles.append(handle)

    @property
    def outstanding(self) -> int:
        return len(self._handles)

    def close(self) -> None:
        """Cancels every outstanding timer. Further `later` calls are ignored."""
        self.closed = True
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
