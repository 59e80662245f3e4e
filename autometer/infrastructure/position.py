"""
Push-fed position source.

The device owns the GPS radio; it reports its permission result and then
posts fixes to the API, which pushes them here.  The meter session reads
them through the ``PositionSource`` interface like any other adapter.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional, Union

from autometer.domain.entities import PositionSample
from autometer.domain.errors import PositionUnavailable
from autometer.domain.ports import PositionOptions

logger = logging.getLogger(__name__)

_CLOSED = object()

_Item = Union[PositionSample, PositionUnavailable, object]


class PushPositionSource:
    def __init__(self, max_backlog: int = 256):
        self.max_backlog = max_backlog
        self.permission_granted = False
        self.options: Optional[PositionOptions] = None
        self._queue: Optional[asyncio.Queue[_Item]] = None

    @property
    def active(self) -> bool:
        return self._queue is not None

    def grant(self, granted: bool) -> None:
        """Record the device's permission result ahead of ``start()``."""
        self.permission_granted = granted

    async def start(self, options: PositionOptions) -> bool:
        if not self.permission_granted:
            return False
        self.options = options
        self._queue = asyncio.Queue(maxsize=self.max_backlog)
        return True

    def push(self, sample: PositionSample) -> bool:
        """Enqueue a fix.  Returns False if no stream is active or it is full."""
        if self._queue is None:
            return False
        try:
            self._queue.put_nowait(sample)
        except asyncio.QueueFull:
            logger.warning("Position backlog full; dropping fix")
            return False
        return True

    def fail(self, reason: str = "Position unavailable") -> bool:
        if self._queue is None:
            return False
        try:
            self._queue.put_nowait(PositionUnavailable(reason))
        except asyncio.QueueFull:
            return False
        return True

    async def samples(self) -> AsyncIterator[PositionSample]:
        queue = self._queue
        if queue is None:
            return
        while True:
            item = await queue.get()
            if item is _CLOSED:
                return
            if isinstance(item, PositionUnavailable):
                raise item
            yield item

    async def stop(self) -> None:
        queue, self._queue = self._queue, None
        if queue is not None:
            try:
                queue.put_nowait(_CLOSED)
            except asyncio.QueueFull:
                pass
