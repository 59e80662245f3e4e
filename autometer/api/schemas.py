"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from autometer.domain.entities import FareBreakdown, MeterSession, TripEstimate
from autometer.domain.pricing import MAX_DISTANCE_KM, format_amount
from autometer.domain.tariff import TariffConfiguration


# ── Requests ──────────────────────────────────────────────────────────


class StartRequest(BaseModel):
    permission_granted: bool = Field(
        ..., description="Result of the device's location-permission prompt."
    )


class PositionRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    timestamp_ms: int = Field(0, ge=0)


class PositionErrorRequest(BaseModel):
    reason: str = Field("Position unavailable", max_length=200)


class ManualDistanceRequest(BaseModel):
    distance_km: float = Field(..., le=MAX_DISTANCE_KM)


class TariffRequest(BaseModel):
    base_fare: float = Field(..., gt=0)
    base_distance_km: float = Field(..., gt=0)
    rate_per_km: float = Field(..., gt=0)

    def to_domain(self) -> TariffConfiguration:
        return TariffConfiguration(
            base_fare=self.base_fare,
            base_distance_km=self.base_distance_km,
            rate_per_km=self.rate_per_km,
        )


class TripEstimateRequest(BaseModel):
    origin: str = Field(..., max_length=300)
    destination: str = Field(..., max_length=300)


class FareQuoteRequest(BaseModel):
    distance_km: float = Field(..., ge=0, le=MAX_DISTANCE_KM)
    is_night: Optional[bool] = Field(
        None, description="Defaults to the current night window."
    )


# ── Responses ─────────────────────────────────────────────────────────


class SessionResponse(BaseModel):
    id: str
    state: str
    source: str
    distance_km: float
    elapsed_seconds: int
    fare: int
    fare_display: str
    is_night: bool
    warning: Optional[str] = None
    started_at: Optional[datetime] = None

    @classmethod
    def from_session(cls, s: MeterSession, symbol: str) -> SessionResponse:
        return cls(
            id=s.id or "",
            state=s.state.value,
            source=s.source.value,
            distance_km=round(s.cumulative_distance_km, 3),
            elapsed_seconds=s.elapsed_seconds,
            fare=s.fare,
            fare_display=format_amount(s.fare, symbol),
            is_night=s.is_night,
            warning=s.warning,
            started_at=s.started_at,
        )


class TariffResponse(BaseModel):
    base_fare: float
    base_distance_km: float
    rate_per_km: float
    night_surcharge_percent: int = 50
    version: int = 0

    @classmethod
    def from_domain(cls, t: TariffConfiguration, version: int) -> TariffResponse:
        return cls(
            base_fare=t.base_fare,
            base_distance_km=t.base_distance_km,
            rate_per_km=t.rate_per_km,
            version=version,
        )


class BreakdownResponse(BaseModel):
    base_fare_amount: float
    additional_distance_km: float
    additional_fare_amount: float
    subtotal: float
    night_surcharge_amount: float
    total: int

    @classmethod
    def from_domain(cls, b: FareBreakdown) -> BreakdownResponse:
        return cls(**asdict(b))


class FareQuoteResponse(BaseModel):
    distance_km: float
    is_night: bool
    fare: int
    breakdown: BreakdownResponse


class TripEstimateResponse(BaseModel):
    id: str
    origin: str
    destination: str
    distance_km: float
    duration_minutes: float
    is_night: bool
    fare: int
    breakdown: BreakdownResponse
    tariff_version: int

    @classmethod
    def from_domain(cls, e: TripEstimate) -> TripEstimateResponse:
        return cls(
            id=e.id,
            origin=e.origin,
            destination=e.destination,
            distance_km=e.distance_km,
            duration_minutes=e.duration_minutes,
            is_night=e.is_night,
            fare=e.fare,
            breakdown=BreakdownResponse.from_domain(e.breakdown),
            tariff_version=e.tariff_version,
        )


class PlaceSuggestionResponse(BaseModel):
    id: str
    description: str
    main_text: str
    secondary_text: str = ""


class AutocompleteResponse(BaseModel):
    superseded: bool = False
    suggestions: list[PlaceSuggestionResponse] = []


class CoordinatesResponse(BaseModel):
    lat: float
    lng: float


class HealthResponse(BaseModel):
    status: str = "ok"
    active_sessions: int = 0
    tariff_version: int = 0

