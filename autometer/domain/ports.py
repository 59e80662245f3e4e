"""
Interfaces for the external collaborators (Dependency Inversion).

Adapters live in ``autometer.infrastructure`` and are supplied at
composition time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Protocol, runtime_checkable

from .entities import PositionSample
from .enums import PositionAccuracy


@dataclass(frozen=True)
class PositionOptions:
    accuracy: PositionAccuracy = PositionAccuracy.HIGH
    time_interval_ms: int = 5_000
    distance_interval_m: int = 10


@dataclass(frozen=True)
class PlaceSuggestion:
    id: str
    description: str
    main_text: str
    secondary_text: str = ""


@dataclass(frozen=True)
class RouteInfo:
    distance_km: float
    duration_minutes: float


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@runtime_checkable
class PositionSource(Protocol):
    async def start(self, options: PositionOptions) -> bool:
        """Acquire permission (and the first fix); return whether it was granted."""
        ...

    def samples(self) -> AsyncIterator[PositionSample]:
        """Yield fixes until stopped; raise ``PositionUnavailable`` on failure."""
        ...

    async def stop(self) -> None:
        """Release the stream.  Safe to call when nothing was started."""
        ...


@runtime_checkable
class MappingService(Protocol):
    async def autocomplete(
        self, query: str, country: Optional[str] = None
    ) -> list[PlaceSuggestion]: ...

    async def distance_and_duration(
        self, origin: str, destination: str
    ) -> Optional[RouteInfo]: ...

    async def geocode(self, address: str) -> Optional[Coordinates]: ...

    async def place_coordinates(self, place_id: str) -> Optional[Coordinates]: ...


@runtime_checkable
class ConfigurationStore(Protocol):
    async def get(self, key: str) -> Optional[Any]: ...

    async def set(self, key: str, value: Any) -> None: ...
