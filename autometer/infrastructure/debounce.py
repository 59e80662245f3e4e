"""
Per-key debouncing for type-ahead lookups.

Each call for a key takes a fresh generation number, waits the delay, and only
then issues the lookup.  A call whose generation is no longer the newest
(before or after the lookup) raises ``RequestSuperseded`` so its result is
never shown over a fresher one.  A key is forgotten once its newest call
finishes, so only keys with a call pending are tracked.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Awaitable, Callable, TypeVar

from autometer.domain.errors import RequestSuperseded

T = TypeVar("T")


class Debouncer:
    def __init__(self, delay_seconds: float = 0.3):
        self.delay_seconds = delay_seconds
        self._generations: dict[str, int] = {}
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._generations)

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        generation = next(self._counter)
        self._generations[key] = generation
        try:
            await asyncio.sleep(self.delay_seconds)
            if self._generations.get(key) != generation:
                raise RequestSuperseded(key)

            result = await factory()
            if self._generations.get(key) != generation:
                raise RequestSuperseded(key)
            return result
        finally:
            if self._generations.get(key) == generation:
                del self._generations[key]
