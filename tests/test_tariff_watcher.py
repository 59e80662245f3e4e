"""Tests for the background tariff watcher."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from autometer.domain.tariff import DEFAULT_TARIFF, TariffCell, TariffConfiguration
from autometer.infrastructure.config_store import InMemoryConfigurationStore
from autometer.infrastructure.tariff_service import TariffService
from autometer.workers import tariff_watcher


@pytest.mark.asyncio
async def test_refresh_cycle_publishes_external_edit():
    store = InMemoryConfigurationStore()
    service = TariffService(store, TariffCell())
    await store.set("fareSettings", {"baseFare": 25, "baseDistance": 1, "ratePerKm": 12})

    assert await tariff_watcher.run_refresh_cycle(service) == 1
    assert service.current() == TariffConfiguration(25, 1, 12)


@pytest.mark.asyncio
async def test_refresh_cycle_survives_store_failure():
    store = AsyncMock()
    store.get = AsyncMock(side_effect=ConnectionError("redis down"))
    service = TariffService(store, TariffCell())

    assert await tariff_watcher.run_refresh_cycle(service) is None
    assert service.current() == DEFAULT_TARIFF


@pytest.mark.asyncio
async def test_loop_picks_up_changes_and_stops():
    store = InMemoryConfigurationStore()
    cell = TariffCell()
    service = TariffService(store, cell)

    await tariff_watcher.start_tariff_watcher(service, interval_seconds=0.01)
    try:
        await store.set("fareSettings", {"baseFare": 50, "baseDistance": 2, "ratePerKm": 20})
        for _ in range(50):
            if cell.get().base_fare == 50:
                break
            await asyncio.sleep(0.01)
        assert cell.get() == TariffConfiguration(50, 2, 20)
    finally:
        await tariff_watcher.stop_tariff_watcher()


@pytest.mark.asyncio
async def test_stop_without_start_is_safe():
    await tariff_watcher.stop_tariff_watcher()
