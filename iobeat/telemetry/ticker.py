"""
IOBeat - Ticker

Fixed-period ticker with a single pending slot.

Ticks fire on a grid of `period` seconds. While the owner is busy, at most
one tick stays pending; every further tick that falls due in the meantime is
dropped. A slow collection therefore delays the next run instead of queueing
a catch-up burst, so the agent sheds load under sustained overruns.
"""

import asyncio
import time
from typing import Callable


class Ticker:
    """Single-slot periodic ticker."""

    def __init__(self, period: float, clock: Callable[[], float] = time.monotonic):
        if period <= 0:
            raise ValueError("period must be positive")
        self.period = period
        self._clock = clock
        self._next = clock() + period
        self.dropped = 0

    def delay(self) -> float:
        """Seconds until the pending tick is due."""
        return max(0.0, self._next - self._clock())

    def _coalesce(self) -> int:
        """Collapse overdue ticks into the single pending slot."""
        behind = self._clock() - self._next
        if behind < self.period:
            return 0
        missed = int(behind // self.period)
        self._next += missed * self.period
        self.dropped += missed
        return missed

    async def wait(self, done: asyncio.Event) -> bool:
        """
        Wait for the next tick or for `done`, whichever comes first.

        Returns False once `done` is set; a pending tick is never consumed
        after cancellation.
        """
        if done.is_set():
            return False

        self._coalesce()
        try:
            await asyncio.wait_for(done.wait(), timeout=self.delay())
        except asyncio.TimeoutError:
            pass

        if done.is_set():
            return False

        self._next += self.period
        return True
