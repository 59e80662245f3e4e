"""
Meter Session Controller
========================

Composes the distance accumulator and the fare engine around one
``MeterSession``.

States
------
IDLE -> TRACKING      start() / start_manual()
TRACKING -> IDLE      stop() / reset()

Concurrency
-----------
Samples, ticks and manual entries are applied by plain synchronous methods,
so on a single event loop each one runs to completion before the next is
processed.  Lifecycle actions (start / stop / reset / manual switch) await
I/O on the position source and are serialised by an ``asyncio.Lock``.

The per-second tick and the position-stream consumer are tasks owned by the
controller; teardown cancels both and is safe to repeat.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from .distance import DistanceAccumulator
from .entities import MeterSession, PositionSample
from .enums import DistanceSource, SessionState
from .errors import InvalidStateTransition, PermissionDenied, PositionUnavailable
from .night import is_night
from .ports import PositionOptions, PositionSource
from .pricing import FareEngine, clamp_distance
from .tariff import TariffCell, TariffConfiguration

logger = logging.getLogger(__name__)


class MeterController:
    def __init__(
        self,
        source: PositionSource,
        tariffs: TariffCell,
        *,
        session: Optional[MeterSession] = None,
        engine: Optional[FareEngine] = None,
        accumulator: Optional[DistanceAccumulator] = None,
        options: Optional[PositionOptions] = None,
        tick_interval: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session or MeterSession()
        self.source = source
        self._tariffs = tariffs
        self._engine = engine or FareEngine()
        self._accumulator = accumulator or DistanceAccumulator()
        self._options = options or PositionOptions()
        self._tick_interval = tick_interval
        self._clock = clock

        self._lifecycle = asyncio.Lock()
        self._tick_task: Optional[asyncio.Task] = None
        self._stream_task: Optional[asyncio.Task] = None
        self._priced = False
        self._unsubscribe = tariffs.subscribe(self._on_tariff_changed)

    # ── Lifecycle ─────────────────────────────────────────────────

    async def start(self) -> None:
        """Acquire the position stream and begin metering from zero."""
        async with self._lifecycle:
            self._require(SessionState.TRACKING)
            granted = await self.source.start(self._options)
            if not granted:
                await self.source.stop()
                logger.info("Session %s: location permission denied", self.session.id)
                raise PermissionDenied("Location permission not granted")
            self._begin(DistanceSource.GPS)
            self._stream_task = asyncio.create_task(self._consume())

    async def start_manual(self) -> None:
        """Begin metering with user-entered distance; no position stream."""
        async with self._lifecycle:
            self._require(SessionState.TRACKING)
            self._begin(DistanceSource.MANUAL)

    async def stop(self) -> None:
        """Release the stream and timer; keep the last displayed values."""
        async with self._lifecycle:
            await self._halt()

    async def reset(self) -> None:
        async with self._lifecycle:
            await self._halt()
            self.session.zero()
            self.session.source = DistanceSource.GPS
            self.session.started_at = None
            self._accumulator.reset()
            self._priced = False
            logger.info("Session %s reset", self.session.id)

    async def close(self) -> None:
        self._unsubscribe()
        await self.stop()

    # ── Events ────────────────────────────────────────────────────

    def tick(self) -> None:
        if self.session.is_tracking:
            self.session.elapsed_seconds += 1

    def on_sample(self, sample: PositionSample) -> None:
        if not self.session.is_tracking or self.session.source is not DistanceSource.GPS:
            return
        before = self._accumulator.total_km
        total = self._accumulator.on_sample(sample)
        if total != before:
            self.on_distance_update(total)

    def on_distance_update(self, distance_km: float) -> Optional[int]:
        """Reprice for a new cumulative distance using the current tariff."""
        if not self.session.is_tracking:
            return None
        distance_km = clamp_distance(distance_km)
        night = is_night(self._clock())
        self.session.cumulative_distance_km = distance_km
        self.session.is_night = night
        self.session.fare = self._engine.compute_fare(
            distance_km, night, self._tariffs.get()
        )
        self._priced = True
        return self.session.fare

    async def enter_manual_distance(self, distance_km: float) -> Optional[int]:
        """Switch to the manual data source (if needed) and feed *distance_km*."""
        async with self._lifecycle:
            if not self.session.is_tracking:
                raise InvalidStateTransition("Manual distance requires a running meter")
            if self.session.source is DistanceSource.GPS:
                await self._release_stream()
                self.session.source = DistanceSource.MANUAL
                self.session.warning = None
        return self.on_distance_update(distance_km)

    def snapshot(self) -> MeterSession:
        return replace(self.session)

    # ── Internals ─────────────────────────────────────────────────

    def _require(self, new_state: SessionState) -> None:
        candidate = replace(self.session)
        candidate.transition_to(new_state)

    def _begin(self, source: DistanceSource) -> None:
        self.session.transition_to(SessionState.TRACKING)
        self.session.zero()
        self.session.source = source
        self._priced = False
        self.session.started_at = self._clock()
        self.session.is_night = is_night(self.session.started_at)
        self._accumulator.reset()
        self._tick_task = asyncio.create_task(self._tick_loop())
        logger.info("Session %s started (%s)", self.session.id, source.value)

    async def _halt(self) -> None:
        await self._release_stream()
        await self._cancel(self._tick_task)
        self._tick_task = None
        if self.session.is_tracking:
            self.session.transition_to(SessionState.IDLE)
            logger.info(
                "Session %s stopped at %.2f km, fare %d",
                self.session.id,
                self.session.cumulative_distance_km,
                self.session.fare,
            )

    async def _release_stream(self) -> None:
        await self._cancel(self._stream_task)
        self._stream_task = None
        await self.source.stop()

    @staticmethod
    async def _cancel(task: Optional[asyncio.Task]) -> None:
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()

    async def _consume(self) -> None:
        try:
            async for sample in self.source.samples():
                self.on_sample(sample)
        except PositionUnavailable as exc:
            logger.warning("Session %s: position unavailable: %s", self.session.id, exc)
            self.session.warning = str(exc) or "Position unavailable"

    def _on_tariff_changed(self, tariff: TariffConfiguration, version: int) -> None:
        if self.session.is_tracking and self._priced:
            self.on_distance_update(self.session.cumulative_distance_km)
