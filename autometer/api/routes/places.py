"""
Place lookup endpoints
======================

GET /api/v1/places/autocomplete?q=&client_id=   -- debounced suggestions
GET /api/v1/places/geocode?address=             -- address -> coordinates
GET /api/v1/places/{place_id}/coordinates       -- place id -> coordinates
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from autometer.api.dependencies import get_debouncer, get_planner
from autometer.api.middleware import limiter
from autometer.api.schemas import (
    AutocompleteResponse,
    CoordinatesResponse,
    PlaceSuggestionResponse,
)
from autometer.domain.errors import RequestSuperseded
from autometer.domain.trip import TripPlanner
from autometer.infrastructure.debounce import Debouncer

router = APIRouter(prefix="/places", tags=["places"])


@router.get(
    "/autocomplete",
    response_model=AutocompleteResponse,
    summary="Place suggestions for a partial address",
    description=(
        "Lookups are debounced per ``client_id``; a request overtaken by a "
        "newer one from the same client returns ``superseded: true`` and "
        "no suggestions."
    ),
)
@limiter.limit("300/minute")
async def autocomplete(
    request: Request,
    q: str = Query("", max_length=200),
    client_id: str = Query("anonymous", max_length=64),
    planner: TripPlanner = Depends(get_planner),
    debouncer: Debouncer = Depends(get_debouncer),
):
    if not q.strip():
        return AutocompleteResponse()
    try:
        suggestions = await debouncer.run(
            client_id, lambda: planner.maps.autocomplete(q)
        )
    except RequestSuperseded:
        return AutocompleteResponse(superseded=True)
    return AutocompleteResponse(
        suggestions=[PlaceSuggestionResponse(**asdict(s)) for s in suggestions]
    )


@router.get(
    "/geocode",
    response_model=CoordinatesResponse,
    summary="Geocode an address",
)
@limiter.limit("100/minute")
async def geocode(
    request: Request,
    address: str = Query(..., min_length=1, max_length=300),
    planner: TripPlanner = Depends(get_planner),
):
    coords = await planner.maps.geocode(address)
    if coords is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return CoordinatesResponse(**asdict(coords))


@router.get(
    "/{place_id}/coordinates",
    response_model=CoordinatesResponse,
    summary="Coordinates of a suggested place",
)
@limiter.limit("100/minute")
async def place_coordinates(
    request: Request,
    place_id: str,
    planner: TripPlanner = Depends(get_planner),
):
    coords = await planner.maps.place_coordinates(place_id)
    if coords is None:
        raise HTTPException(status_code=404, detail="Place not found")
    return CoordinatesResponse(**asdict(coords))
