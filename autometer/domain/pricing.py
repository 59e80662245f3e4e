"""
Fare Engine  (Strategy Pattern)
===============================

Formula
-------
Subtotal = Base_Fare                                        if d <= Base_Distance
         = Base_Fare + Rate_Per_KM x (d - Base_Distance)    otherwise

Fare = round(Subtotal x Night_Multiplier)

* **Night_Multiplier** = 1.5 between 22:00 and 05:00, else 1.0.  Night is
  a time attribute, so it also applies to a zero-distance trip.
* Rounding is to the nearest whole rupee, ties away from zero, applied
  once to the unrounded total.

The engine never raises for numeric input: a negative or NaN distance is
treated as 0, a distance beyond ``MAX_DISTANCE_KM`` is capped there, and an
invalid tariff (or one whose fare overflows) is replaced with the default.

Complexity: O(1) per fare.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .entities import FareBreakdown
from .tariff import DEFAULT_TARIFF, MAX_BASE_DISTANCE_KM, TariffConfiguration

logger = logging.getLogger(__name__)

NIGHT_SURCHARGE = 0.5
MAX_DISTANCE_KM = 100_000.0


def round_fare(amount: float) -> int:
    """Round to the nearest whole currency unit, ties away from zero."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(amount: float, symbol: str = "₹") -> str:
    return f"{symbol}{amount:.2f}"


def clamp_distance(distance_km: float) -> float:
    try:
        distance_km = float(distance_km)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(distance_km) or distance_km < 0:
        return 0.0
    return min(distance_km, MAX_DISTANCE_KM)


# ── Strategy hierarchy ────────────────────────────────────────────────


class FareStrategy(ABC):
    surcharge_rate: float = 0.0

    @abstractmethod
    def surcharge(self, subtotal: float) -> float: ...


class DayFare(FareStrategy):
    def surcharge(self, subtotal: float) -> float:
        return 0.0


class NightFare(FareStrategy):
    """Adds a fixed 50 % on top of the full subtotal."""

    surcharge_rate = NIGHT_SURCHARGE

    def surcharge(self, subtotal: float) -> float:
        return subtotal * self.surcharge_rate


# ── Engine facade ─────────────────────────────────────────────────────


class FareEngine:
    """High-level API used by the meter session and the trip planner."""

    def __init__(
        self,
        default_tariff: TariffConfiguration = DEFAULT_TARIFF,
        max_base_distance_km: float = MAX_BASE_DISTANCE_KM,
    ):
        self.default_tariff = default_tariff
        self.max_base_distance_km = max_base_distance_km

    @staticmethod
    def strategy_for(is_night: bool) -> FareStrategy:
        return NightFare() if is_night else DayFare()

    def resolve_tariff(
        self, tariff: Optional[TariffConfiguration]
    ) -> TariffConfiguration:
        if tariff is None:
            return self.default_tariff
        if not tariff.is_valid(self.max_base_distance_km):
            logger.warning("Invalid tariff %r, using default", tariff)
            return self.default_tariff
        return tariff

    def breakdown(
        self,
        distance_km: float,
        is_night: bool,
        tariff: Optional[TariffConfiguration] = None,
    ) -> FareBreakdown:
        t = self.resolve_tariff(tariff)
        d = clamp_distance(distance_km)
        result = self._price(d, is_night, t)
        if result is None:
            logger.warning("Fare overflows under tariff %r, using default", t)
            result = self._price(d, is_night, self.default_tariff) or self._price(
                d, is_night, DEFAULT_TARIFF
            )
        return result

    def _price(
        self, d: float, is_night: bool, t: TariffConfiguration
    ) -> Optional[FareBreakdown]:
        additional_km = max(0.0, d - t.base_distance_km)
        additional_fare = t.rate_per_km * additional_km if additional_km else 0.0
        subtotal = t.base_fare + additional_fare
        surcharge = self.strategy_for(is_night).surcharge(subtotal)
        if not math.isfinite(subtotal + surcharge):
            return None

        return FareBreakdown(
            base_fare_amount=t.base_fare,
            additional_distance_km=additional_km,
            additional_fare_amount=additional_fare,
            subtotal=subtotal,
            night_surcharge_amount=surcharge,
            total=round_fare(subtotal + surcharge),
        )

    def compute_fare(
        self,
        distance_km: float,
        is_night: bool,
        tariff: Optional[TariffConfiguration] = None,
    ) -> int:
        return self.breakdown(distance_km, is_night, tariff).total
