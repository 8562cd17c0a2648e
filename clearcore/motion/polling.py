"""
Fixed-interval ticker for status polling loops.

The first tick completes immediately. Later ticks land on multiples of the
period from the first one; if the caller falls behind, missed ticks are
collapsed into the next future deadline instead of firing back to back.
"""

import asyncio
from typing import Optional


class IntervalTicker:

    def __init__(self, period: float):
        if period <= 0:
            raise ValueError(f"Ticker period must be positive, got {period}")
        self.period = period
        self._next_deadline: Optional[float] = None

    async def tick(self) -> None:
        loop = asyncio.get_running_loop()
        now = loop.time()

        if self._next_deadline is None:
            self._next_deadline = now
        elif self._next_deadline > now:
            await asyncio.sleep(self._next_deadline - now)
            now = loop.time()

        # Skip every deadline already in the past
        missed = int((now - self._next_deadline) // self.period)
        self._next_deadline += (missed + 1) * self.period
