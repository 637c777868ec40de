"""
Clocks used by the retry engine to measure elapsed time and yield between polls.

``MonotonicClock`` drives real browser sessions. ``VirtualClock`` advances
time only when someone sleeps on it, which makes timing-sensitive tests
deterministic.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol


class Clock(Protocol):
    """Cooperative time source."""

    def now_ms(self) -> float:
        ...

    async def sleep(self, ms: float) -> None:
        ...


class MonotonicClock:
    """Wall-clock time backed by ``time.monotonic`` and ``asyncio.sleep``."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    async def sleep(self, ms: float) -> None:
        await asyncio.sleep(max(ms, 0) / 1000.0)


class VirtualClock:
    """
    Simulated time.

    ``sleep`` advances the clock by the requested amount and yields to the
    event loop once, so other tasks still get a turn.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)

    def now_ms(self) -> float:
        return self._now

    def advance(self, ms: float) -> None:
        self._now += max(ms, 0)

    async def sleep(self, ms: float) -> None:
        self.advance(ms)
        await asyncio.sleep(0)


__all__ = [
    "Clock",
    "MonotonicClock",
    "VirtualClock",
]
