"""Shared fixtures for racetracker tests."""

import asyncio
import heapq

import pytest


class VirtualClock:
    """
    Deterministic stand-in for asyncio.sleep.

    Sleepers only wake when the test calls advance(), so timing-based
    behavior can be checked without waiting in real time.
    """

    def __init__(self):
        self.now = 0.0
        self._sleepers: list[tuple[float, int, asyncio.Future]] = []
        self._seq = 0

    async def sleep(self, delay: float):
        future = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self.now + delay, self._seq, future))
        self._seq += 1
        await future

    async def run_current(self):
        """Let every task that is ready to run do so."""
        for _ in range(10):
            await asyncio.sleep(0)

    async def advance(self, seconds: float):
        """Move virtual time forward, waking sleepers in deadline order."""
        target = self.now + seconds
        await self.run_current()
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            self.now = deadline
            if not future.done():
                future.set_result(None)
            await self.run_current()
        self.now = target


@pytest.fixture
def clock():
    return VirtualClock()
