"""
Tariff configuration and the version-stamped cell that shares it.

The persisted shape mirrors what the mobile client has always stored under
the ``fareSettings`` key::

    {"baseFare": 30, "baseDistance": 1.5, "ratePerKm": 15}
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)

MAX_BASE_DISTANCE_KM = 10.0


@dataclass(frozen=True)
class TariffConfiguration:
    base_fare: float
    base_distance_km: float
    rate_per_km: float

    def validate(self, max_base_distance_km: float = MAX_BASE_DISTANCE_KM) -> None:
        """Raise ``InvalidConfiguration`` unless every field is finite and > 0."""
        for name in ("base_fare", "base_distance_km", "rate_per_km"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidConfiguration(f"{name} must be a number")
            if not math.isfinite(value) or value <= 0:
                raise InvalidConfiguration(f"{name} must be greater than 0")
        if self.base_distance_km > max_base_distance_km:
            raise InvalidConfiguration(
                f"base_distance_km should not exceed {max_base_distance_km:g} km"
            )

    def is_valid(self, max_base_distance_km: float = MAX_BASE_DISTANCE_KM) -> bool:
        try:
            self.validate(max_base_distance_km)
        except InvalidConfiguration:
            return False
        return True

    def to_store(self) -> dict[str, float]:
        return {
            "baseFare": self.base_fare,
            "baseDistance": self.base_distance_km,
            "ratePerKm": self.rate_per_km,
        }

    @classmethod
    def from_store(cls, raw: Any) -> TariffConfiguration:
        """Build from the persisted dict; raise ``InvalidConfiguration`` if malformed."""
        if not isinstance(raw, dict):
            raise InvalidConfiguration("stored tariff is not an object")
        try:
            return cls(
                base_fare=raw["baseFare"],
                base_distance_km=raw["baseDistance"],
                rate_per_km=raw["ratePerKm"],
            )
        except KeyError as exc:
            raise InvalidConfiguration(f"stored tariff is missing {exc}") from exc


DEFAULT_TARIFF = TariffConfiguration(
    base_fare=30.0, base_distance_km=1.5, rate_per_km=15.0
)


TariffListener = Callable[[TariffConfiguration, int], None]


class TariffCell:
    """
    Holds the latest valid tariff with a monotonically increasing version.

    Readers call ``get()`` on every use instead of caching; writers call
    ``set()``.  Subscribers are notified synchronously whenever the value
    actually changes.
    """

    def __init__(self, initial: Optional[TariffConfiguration] = None):
        self._value = initial or DEFAULT_TARIFF
        self._version = 0
        self._listeners: list[TariffListener] = []

    @property
    def version(self) -> int:
        return self._version

    def get(self) -> TariffConfiguration:
        return self._value

    def set(self, tariff: TariffConfiguration) -> bool:
        """Replace the value.  Returns True if it changed."""
        if tariff == self._value:
            return False
        self._value = tariff
        self._version += 1
        for listener in list(self._listeners):
            try:
                listener(tariff, self._version)
            except Exception:
                logger.exception("Tariff listener failed")
        return True

    def subscribe(self, listener: TariffListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
