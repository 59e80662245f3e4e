"""
Google Maps web-service client (Places, Geocoding, Distance Matrix).

Status handling
---------------
* ``OK``                               -> parsed result
* ``ZERO_RESULTS`` / ``NOT_FOUND``     -> ``None`` (or an empty list)
* any other status, HTTP error, timeout,
  network error or malformed payload   -> ``MappingServiceUnavailable``
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from autometer.domain.errors import MappingServiceUnavailable
from autometer.domain.ports import Coordinates, PlaceSuggestion, RouteInfo

logger = logging.getLogger(__name__)

_EMPTY_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


class GoogleMapsClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api",
        country: str = "in",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.country = country
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> Optional[dict]:
        """GET a JSON endpoint; ``None`` means the service found nothing."""
        url = f"{self.base_url}/{path}"
        try:
            response = await self._client.get(
                url, params={**params, "key": self.api_key}
            )
        except httpx.TimeoutException as e:
            raise MappingServiceUnavailable(
                f"Request timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise MappingServiceUnavailable(f"Network error: {e}") from e

        if response.status_code >= 500:
            raise MappingServiceUnavailable(
                f"Maps server error: {response.status_code}"
            )
        if response.status_code >= 400:
            raise MappingServiceUnavailable(
                f"Maps request rejected: {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MappingServiceUnavailable("Maps returned invalid JSON") from e
        if not isinstance(data, dict):
            raise MappingServiceUnavailable("Maps returned an unexpected payload")

        status = data.get("status", "OK")
        if status in _EMPTY_STATUSES:
            return None
        if status != "OK":
            logger.warning("Maps %s returned %s: %s", path, status, data.get("error_message"))
            raise MappingServiceUnavailable(f"Maps error status: {status}")
        return data

    async def autocomplete(
        self, query: str, country: Optional[str] = None
    ) -> list[PlaceSuggestion]:
        if not query.strip():
            return []
        data = await self._get(
            "place/autocomplete/json",
            {
                "input": query,
                "components": f"country:{country or self.country}",
                "types": "establishment|geocode",
            },
        )
        if data is None:
            return []
        suggestions = []
        for p in data.get("predictions") or []:
            if not isinstance(p, dict) or not p.get("place_id"):
                logger.debug("Skipping malformed prediction %r", p)
                continue
            fmt = p.get("structured_formatting") or {}
            suggestions.append(
                PlaceSuggestion(
                    id=p["place_id"],
                    description=p.get("description", ""),
                    main_text=fmt.get("main_text", ""),
                    secondary_text=fmt.get("secondary_text") or "",
                )
            )
        return suggestions

    async def distance_and_duration(
        self, origin: str, destination: str
    ) -> Optional[RouteInfo]:
        data = await self._get(
            "distancematrix/json",
            {
                "origins": origin,
                "destinations": destination,
                "mode": "driving",
                "units": "metric",
                "avoid": "tolls",
            },
        )
        if data is None:
            return None
        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            return None
        if not isinstance(element, dict) or element.get("status") != "OK":
            return None
        try:
            return RouteInfo(
                distance_km=element["distance"]["value"] / 1000,
                duration_minutes=element["duration"]["value"] / 60,
            )
        except (KeyError, TypeError) as e:
            raise MappingServiceUnavailable("Malformed distance matrix element") from e

    async def geocode(self, address: str) -> Optional[Coordinates]:
        data = await self._get(
            "geocode/json",
            {"address": address, "components": f"country:{self.country.upper()}"},
        )
        if not data or not data.get("results"):
            return None
        try:
            return _coordinates(data["results"][0]["geometry"])
        except (KeyError, IndexError, TypeError) as e:
            raise MappingServiceUnavailable("Malformed geocode result") from e

    async def place_coordinates(self, place_id: str) -> Optional[Coordinates]:
        data = await self._get(
            "place/details/json", {"place_id": place_id, "fields": "geometry"}
        )
        if not data:
            return None
        geometry = (data.get("result") or {}).get("geometry")
        if not geometry:
            return None
        try:
            return _coordinates(geometry)
        except (KeyError, TypeError) as e:
            raise MappingServiceUnavailable("Malformed place details") from e


def _coordinates(geometry: dict) -> Coordinates:
    loc = geometry["location"]
    return Coordinates(lat=loc["lat"], lng=loc["lng"])
