"""FastAPI dependency injection helpers."""

from fastapi import Request

from autometer.domain.session import MeterController
from autometer.domain.trip import TripPlanner
from autometer.infrastructure.debounce import Debouncer
from autometer.infrastructure.sessions import SessionRegistry
from autometer.infrastructure.tariff_service import TariffService


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_tariff_service(request: Request) -> TariffService:
    return request.app.state.tariff_service


def get_planner(request: Request) -> TripPlanner:
    return request.app.state.planner


def get_debouncer(request: Request) -> Debouncer:
    return request.app.state.debouncer


def get_controller(session_id: str, request: Request) -> MeterController:
    """Resolve the path's session id; unknown ids surface as 404."""
    return get_registry(request).get(session_id)
