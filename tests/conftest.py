"""
Shared test fixtures.

Everything runs in-process: the tariff store is the in-memory store, the
mapping service is a scripted fake, and clocks are pinned to a fixed day
or night time so fares are deterministic.
"""

import asyncio
from datetime import datetime
from typing import Optional

import pytest

from autometer.domain.errors import MappingServiceUnavailable
from autometer.domain.ports import Coordinates, PlaceSuggestion, RouteInfo
from autometer.domain.tariff import DEFAULT_TARIFF, TariffCell

DAY = datetime(2024, 3, 1, 12, 0)
NIGHT = datetime(2024, 3, 1, 23, 0)

KM_PER_DEGREE_LAT = 111.19492664455873


def north_of(lat: float, km: float) -> float:
    """Latitude *km* kilometres due north of *lat*."""
    return lat + km / KM_PER_DEGREE_LAT


async def drain(rounds: int = 5) -> None:
    """Let background tasks process whatever is queued."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeMaps:
    """Scripted ``MappingService``."""

    def __init__(
        self,
        route: Optional[RouteInfo] = RouteInfo(distance_km=5.0, duration_minutes=18.0),
        fail: bool = False,
    ):
        self.route = route
        self.fail = fail
        self.calls: list[tuple] = []

    async def autocomplete(self, query, country=None):
        self.calls.append(("autocomplete", query))
        if self.fail:
            raise MappingServiceUnavailable("maps down")
        return [
            PlaceSuggestion(
                id="p1",
                description=f"{query} Junction, Kochi, Kerala, India",
                main_text=f"{query} Junction",
                secondary_text="Kochi, Kerala, India",
            )
        ]

    async def distance_and_duration(self, origin, destination):
        self.calls.append(("route", origin, destination))
        if self.fail:
            raise MappingServiceUnavailable("maps down")
        return self.route

    async def geocode(self, address):
        self.calls.append(("geocode", address))
        if self.fail:
            raise MappingServiceUnavailable("maps down")
        return None if address == "nowhere" else Coordinates(lat=9.9312, lng=76.2673)

    async def place_coordinates(self, place_id):
        self.calls.append(("place", place_id))
        return Coordinates(lat=9.9816, lng=76.2999) if place_id == "p1" else None


@pytest.fixture
def cell() -> TariffCell:
    return TariffCell(DEFAULT_TARIFF)


@pytest.fixture
def fake_maps() -> FakeMaps:
    return FakeMaps()
