"""
Trip planner endpoints
======================

POST   /api/v1/trips/estimate   -- estimate a fare between two addresses
GET    /api/v1/trips/{id}       -- displayed estimate, repriced on tariff edits
DELETE /api/v1/trips/{id}       -- clear a displayed estimate
POST   /api/v1/fares/quote      -- fare for a known distance
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from autometer.api.dependencies import get_planner
from autometer.api.middleware import limiter
from autometer.api.schemas import (
    BreakdownResponse,
    FareQuoteRequest,
    FareQuoteResponse,
    TripEstimateRequest,
    TripEstimateResponse,
)
from autometer.config import settings
from autometer.domain.trip import TripPlanner

router = APIRouter(tags=["trips"])


@router.post(
    "/trips/estimate",
    status_code=201,
    response_model=TripEstimateResponse,
    summary="Estimate a trip fare",
    responses={
        404: {"description": "No route between the addresses."},
        502: {"description": "Mapping service unavailable."},
    },
)
@limiter.limit(settings.rate_limit)
async def estimate_trip(
    request: Request,
    body: TripEstimateRequest,
    planner: TripPlanner = Depends(get_planner),
):
    try:
        estimate = await planner.estimate(body.origin, body.destination)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return TripEstimateResponse.from_domain(estimate)


@router.get(
    "/trips/{estimate_id}",
    response_model=TripEstimateResponse,
    summary="Get a displayed estimate",
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    estimate_id: str,
    planner: TripPlanner = Depends(get_planner),
):
    estimate = planner.get(estimate_id)
    if not estimate:
        raise HTTPException(status_code=404, detail="Estimate not found")
    return TripEstimateResponse.from_domain(estimate)


@router.delete("/trips/{estimate_id}", status_code=204, summary="Clear an estimate")
@limiter.limit(settings.rate_limit)
async def clear_trip(
    request: Request,
    estimate_id: str,
    planner: TripPlanner = Depends(get_planner),
):
    if not planner.clear(estimate_id):
        raise HTTPException(status_code=404, detail="Estimate not found")
    return Response(status_code=204)


@router.post(
    "/fares/quote",
    response_model=FareQuoteResponse,
    summary="Fare for a known distance",
)
@limiter.limit(settings.rate_limit)
async def quote_fare(
    request: Request,
    body: FareQuoteRequest,
    planner: TripPlanner = Depends(get_planner),
):
    night, breakdown = planner.quote(body.distance_km, body.is_night)
    return FareQuoteResponse(
        distance_km=body.distance_km,
        is_night=night,
        fare=breakdown.total,
        breakdown=BreakdownResponse.from_domain(breakdown),
    )
