"""
Trip planner: one-shot fare estimate between two addresses.

Route distance comes from the mapping service; the live distance
accumulator is not involved.  Displayed estimates are repriced whenever
the tariff cell changes; only the newest ``max_displayed`` are kept.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Optional

from .entities import FareBreakdown, TripEstimate
from .errors import NoRouteFound
from .night import is_night
from .ports import MappingService
from .pricing import FareEngine
from .tariff import TariffCell, TariffConfiguration

logger = logging.getLogger(__name__)


class TripPlanner:
    def __init__(
        self,
        maps: MappingService,
        tariffs: TariffCell,
        engine: Optional[FareEngine] = None,
        clock: Callable[[], datetime] = datetime.now,
        max_displayed: int = 256,
    ):
        self.maps = maps
        self._tariffs = tariffs
        self._engine = engine or FareEngine()
        self._clock = clock
        self.max_displayed = max_displayed
        self._displayed: OrderedDict[str, TripEstimate] = OrderedDict()
        self._unsubscribe = tariffs.subscribe(self._on_tariff_changed)

    async def estimate(self, origin: str, destination: str) -> TripEstimate:
        origin, destination = origin.strip(), destination.strip()
        if not origin or not destination:
            raise ValueError("Both source and destination are required")

        route = await self.maps.distance_and_duration(origin, destination)
        if route is None:
            raise NoRouteFound(
                f"Could not find a route between {origin!r} and {destination!r}"
            )

        night = is_night(self._clock())
        breakdown = self._engine.breakdown(
            route.distance_km, night, self._tariffs.get()
        )
        estimate = TripEstimate(
            id=uuid.uuid4().hex,
            origin=origin,
            destination=destination,
            distance_km=route.distance_km,
            duration_minutes=route.duration_minutes,
            is_night=night,
            fare=breakdown.total,
            breakdown=breakdown,
            tariff_version=self._tariffs.version,
            created_at=self._clock(),
        )
        self._displayed[estimate.id] = estimate
        while len(self._displayed) > self.max_displayed:
            self._displayed.popitem(last=False)
        logger.info(
            "Trip estimate %s: %.2f km, fare %d", estimate.id, route.distance_km, estimate.fare
        )
        return estimate

    def quote(
        self, distance_km: float, night: Optional[bool] = None
    ) -> tuple[bool, FareBreakdown]:
        """Fare breakdown for a known distance; night defaults to the clock."""
        if night is None:
            night = is_night(self._clock())
        return night, self._engine.breakdown(distance_km, night, self._tariffs.get())

    def get(self, estimate_id: str) -> Optional[TripEstimate]:
        return self._displayed.get(estimate_id)

    def clear(self, estimate_id: str) -> bool:
        return self._displayed.pop(estimate_id, None) is not None

    def close(self) -> None:
        self._unsubscribe()
        self._displayed.clear()

    def _on_tariff_changed(self, tariff: TariffConfiguration, version: int) -> None:
        night = is_night(self._clock())
        for estimate_id, estimate in list(self._displayed.items()):
            breakdown = self._engine.breakdown(estimate.distance_km, night, tariff)
            self._displayed[estimate_id] = estimate.repriced(breakdown, night, version)
        if self._displayed:
            logger.info("Repriced %d displayed estimates (tariff v%d)", len(self._displayed), version)
