"""
Time sources for the motion queue.

The queue only ever waits through ``clock.sleep``, so swapping
``MonotonicClock`` for ``VirtualClock`` makes playback deterministic and
instantaneous in tests.
"""

from __future__ import annotations

import asyncio
import time
from typing import List


class MonotonicClock:
    """Real time: ``time.monotonic`` and ``asyncio.sleep``."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class VirtualClock:
    """Simulated time that advances by exactly the requested amount.

    Every ``sleep`` still yields to the event loop once, so other tasks
    (and emergency stops issued by them) interleave as they would in real
    time.

    Attributes:
        sleeps: Every duration passed to ``sleep``, in call order.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += max(0.0, seconds)
        await asyncio.sleep(0)
