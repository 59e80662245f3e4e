"""
Tariff service: the single writer of the persisted tariff.

``load()`` re-reads the store and publishes the result into the shared
``TariffCell``; it never raises for a bad stored value, it substitutes the
default instead.  ``save()`` is the only path that persists a tariff and it
rejects invalid ones before they reach the store.
"""

from __future__ import annotations

import logging

from autometer.domain.errors import InvalidConfiguration
from autometer.domain.ports import ConfigurationStore
from autometer.domain.tariff import (
    DEFAULT_TARIFF,
    MAX_BASE_DISTANCE_KM,
    TariffCell,
    TariffConfiguration,
)

logger = logging.getLogger(__name__)


class TariffService:
    def __init__(
        self,
        store: ConfigurationStore,
        cell: TariffCell,
        *,
        key: str = "fareSettings",
        default: TariffConfiguration = DEFAULT_TARIFF,
        max_base_distance_km: float = MAX_BASE_DISTANCE_KM,
    ):
        self.store = store
        self.cell = cell
        self.key = key
        self.default = default
        self.max_base_distance_km = max_base_distance_km

    def current(self) -> TariffConfiguration:
        return self.cell.get()

    async def load(self) -> TariffConfiguration:
        raw = await self.store.get(self.key)
        if raw is None:
            tariff = self.default
        else:
            try:
                tariff = TariffConfiguration.from_store(raw)
                tariff.validate(self.max_base_distance_km)
            except InvalidConfiguration as exc:
                logger.warning("Stored tariff rejected (%s); using default", exc)
                tariff = self.default
        self.cell.set(tariff)
        return tariff

    async def save(self, tariff: TariffConfiguration) -> TariffConfiguration:
        tariff.validate(self.max_base_distance_km)
        await self.store.set(self.key, tariff.to_store())
        self.cell.set(tariff)
        logger.info("Tariff saved: %s", tariff.to_store())
        return tariff

    async def reset_to_defaults(self) -> TariffConfiguration:
        return await self.save(self.default)
