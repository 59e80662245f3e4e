"""
Background Tariff Watcher
=========================

Runs every ``TARIFF_REFRESH_INTERVAL_SECONDS`` (default 1 s).

Saves made through this process update the shared ``TariffCell``
immediately.  The watcher catches edits written to the store by other
processes: each cycle re-reads the store and publishes the result into the
cell, which notifies subscribers (live meters, displayed trip estimates)
only when the tariff actually changed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from autometer.infrastructure.tariff_service import TariffService

logger = logging.getLogger(__name__)

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_tariff_watcher(service: TariffService, interval_seconds: float) -> None:
    global _task, _stop_event
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop(service, interval_seconds))
    logger.info("Tariff watcher started (interval=%.1fs)", interval_seconds)


async def stop_tariff_watcher() -> None:
    global _task, _stop_event
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    _task = _stop_event = None
    logger.info("Tariff watcher stopped")


# ── Internals ─────────────────────────────────────────────────────────


async def _loop(service: TariffService, interval_seconds: float) -> None:
    """Periodic loop: refresh the tariff then sleep."""
    assert _stop_event is not None
    stop = _stop_event
    while not stop.is_set():
        await run_refresh_cycle(service)
        # Wait for the interval or until stop is signalled
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
            break
        except asyncio.TimeoutError:
            pass  # next cycle


async def run_refresh_cycle(service: TariffService) -> Optional[int]:
    """Refresh once.  Returns the cell version, or None if the store failed."""
    try:
        await service.load()
    except Exception:
        logger.exception("Error refreshing tariff")
        return None
    return service.cell.version
