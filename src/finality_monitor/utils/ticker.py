"""
Periodic ticker for driving the sampling loop.

"""

import asyncio
import logging
import math
from typing import Protocol


class Clock(Protocol):
    """Time source used by the ticker."""

    def monotonic(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class LoopClock:
    """Clock backed by the running asyncio event loop."""

    def monotonic(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class Ticker:
    """
    Fires once per period, aligned to the time of the first ``tick()`` call.
    
    The first tick happens one full period after the first call. If the caller
    falls behind (a round takes longer than a period), the missed boundaries
    are dropped instead of firing back to back.
    """

    def __init__(self, period: float, clock: Clock | None = None):
        """
        Initialize the ticker.
        
        Args:
            period: Seconds between ticks
            clock: Time source, defaults to the event loop clock
        """
        if not math.isfinite(period) or period <= 0:
            raise ValueError(f"Ticker period must be a positive finite number, got {period}")
        self.period = period
        self.clock: Clock = clock or LoopClock()
        self.ticks = 0
        self.dropped = 0
        self._next_deadline: float | None = None

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def tick(self) -> int:
        """
        Wait for the next period boundary.
        
        Returns:
            The ordinal of this tick, starting at 1
        """
        now = self.clock.monotonic()
        if self._next_deadline is None:
            self._next_deadline = now + self.period
        elif self._next_deadline <= now:
            missed = int((now - self._next_deadline) // self.period)
            if missed:
                self.dropped += missed
                self._next_deadline += missed * self.period
                self.logger.debug(f"Dropped {missed} tick(s), caller fell behind")

        delay = self._next_deadline - now
        if delay > 0:
            await self.clock.sleep(delay)

        self._next_deadline += self.period
        self.ticks += 1
        return self.ticks
