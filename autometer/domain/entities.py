"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``MeterSession``: enforces valid lifecycle
  transitions (IDLE -> TRACKING -> IDLE).
- ``TripEstimate`` is an immutable snapshot; repricing returns a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from .enums import DistanceSource, SessionState, SESSION_TRANSITIONS
from .errors import InvalidStateTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class PositionSample:
    latitude: float
    longitude: float
    timestamp_ms: int = 0


@dataclass(frozen=True)
class FareBreakdown:
    base_fare_amount: float
    additional_distance_km: float
    additional_fare_amount: float
    subtotal: float
    night_surcharge_amount: float
    total: int


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class MeterSession:
    id: Optional[str] = None
    state: SessionState = SessionState.IDLE
    source: DistanceSource = DistanceSource.GPS
    cumulative_distance_km: float = 0.0
    elapsed_seconds: int = 0
    fare: int = 0
    is_night: bool = False
    warning: Optional[str] = None
    started_at: Optional[datetime] = None

    @property
    def is_tracking(self) -> bool:
        return self.state is SessionState.TRACKING

    def transition_to(self, new_state: SessionState) -> None:
        """Move to *new_state* if the transition is legal, else raise."""
        allowed = SESSION_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.state} to {new_state}"
            )
        self.state = new_state

    def zero(self) -> None:
        self.cumulative_distance_km = 0.0
        self.elapsed_seconds = 0
        self.fare = 0
        self.is_night = False
        self.warning = None


@dataclass(frozen=True)
class TripEstimate:
    id: str
    origin: str
    destination: str
    distance_km: float
    duration_minutes: float
    is_night: bool
    fare: int
    breakdown: FareBreakdown
    tariff_version: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def repriced(
        self, breakdown: FareBreakdown, is_night: bool, tariff_version: int
    ) -> TripEstimate:
        return replace(
            self,
            breakdown=breakdown,
            fare=breakdown.total,
            is_night=is_night,
            tariff_version=tariff_version,
        )
