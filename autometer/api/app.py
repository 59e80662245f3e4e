"""
FastAPI application factory.

* Wires the tariff store, tariff cell, session registry, trip planner and
  maps client onto ``app.state``.
* Loads the stored tariff and runs the tariff watcher via lifespan events.
* Maps domain errors to HTTP statuses and applies rate limiting.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from autometer.api.middleware import limiter
from autometer.api.routes import admin, meter, places, tariff, trips
from autometer.config import Settings, settings as default_settings
from autometer.domain.distance import DistanceAccumulator
from autometer.domain.enums import PositionAccuracy
from autometer.domain.errors import (
    InvalidConfiguration,
    InvalidStateTransition,
    MappingServiceUnavailable,
    NoRouteFound,
    PermissionDenied,
)
from autometer.domain.ports import ConfigurationStore, MappingService, PositionOptions
from autometer.domain.pricing import FareEngine
from autometer.domain.tariff import TariffCell, TariffConfiguration
from autometer.domain.trip import TripPlanner
from autometer.infrastructure.config_store import (
    InMemoryConfigurationStore,
    RedisConfigurationStore,
)
from autometer.infrastructure.debounce import Debouncer
from autometer.infrastructure.maps_client import GoogleMapsClient
from autometer.infrastructure.sessions import SessionNotFound, SessionRegistry
from autometer.infrastructure.tariff_service import TariffService
from autometer.workers import tariff_watcher as _watcher

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the tariff and start the watcher on startup; tear down on shutdown."""
    cfg: Settings = app.state.settings
    try:
        await app.state.tariff_service.load()
    except Exception:
        logger.exception("Could not load stored tariff; using default")
    await _watcher.start_tariff_watcher(
        app.state.tariff_service, cfg.tariff_refresh_interval_seconds
    )
    yield
    await _watcher.stop_tariff_watcher()
    await app.state.registry.close_all()
    app.state.planner.close()
    aclose = getattr(app.state.planner.maps, "aclose", None)
    if aclose is not None:
        await aclose()


def _build_store(cfg: Settings) -> ConfigurationStore:
    if cfg.tariff_store == "memory":
        return InMemoryConfigurationStore()
    return RedisConfigurationStore(url=cfg.redis_url)


def _error_handler(status_code: int, **extra):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status_code, content={"detail": str(exc), **extra}
        )

    return handler


def create_app(
    cfg: Optional[Settings] = None,
    store: Optional[ConfigurationStore] = None,
    maps: Optional[MappingService] = None,
) -> FastAPI:
    cfg = cfg or default_settings

    app = FastAPI(
        title="Autometer API",
        description=(
            "Auto-rickshaw fare meter and trip-cost estimator.  Tracks a "
            "live meter session from pushed position fixes, applies the "
            "configurable tariff with the night surcharge, and estimates "
            "fares between two addresses."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    default_tariff = TariffConfiguration(
        base_fare=cfg.default_base_fare,
        base_distance_km=cfg.default_base_distance_km,
        rate_per_km=cfg.default_rate_per_km,
    )
    engine = FareEngine(default_tariff, cfg.max_base_distance_km)
    cell = TariffCell(default_tariff)

    app.state.settings = cfg
    app.state.tariff_service = TariffService(
        store or _build_store(cfg),
        cell,
        key=cfg.fare_settings_key,
        default=default_tariff,
        max_base_distance_km=cfg.max_base_distance_km,
    )
    app.state.registry = SessionRegistry(
        cell,
        engine=engine,
        options=PositionOptions(
            accuracy=PositionAccuracy(cfg.position_accuracy),
            time_interval_ms=cfg.position_time_interval_ms,
            distance_interval_m=cfg.position_distance_interval_m,
        ),
        tick_interval=cfg.tick_interval_seconds,
        accumulator_factory=lambda: DistanceAccumulator(
            cfg.jitter_floor_km, cfg.teleport_ceiling_km
        ),
    )
    app.state.planner = TripPlanner(
        maps
        or GoogleMapsClient(
            cfg.google_maps_api_key,
            base_url=cfg.google_maps_base_url,
            country=cfg.maps_country,
            timeout=cfg.maps_timeout_seconds,
        ),
        cell,
        engine,
        max_displayed=cfg.max_displayed_estimates,
    )
    app.state.debouncer = Debouncer(cfg.autocomplete_debounce_seconds)

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(
        PermissionDenied, _error_handler(403, manual_fallback=True)
    )
    app.add_exception_handler(InvalidConfiguration, _error_handler(422))
    app.add_exception_handler(InvalidStateTransition, _error_handler(409))
    app.add_exception_handler(NoRouteFound, _error_handler(404))
    app.add_exception_handler(MappingServiceUnavailable, _error_handler(502))
    app.add_exception_handler(SessionNotFound, _error_handler(404))

    # Routers
    app.include_router(meter.router, prefix="/api/v1")
    app.include_router(tariff.router, prefix="/api/v1")
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(places.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
