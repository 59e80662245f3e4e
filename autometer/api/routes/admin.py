"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health -- health check with live-session count
"""

from fastapi import APIRouter, Depends

from autometer.api.dependencies import get_registry, get_tariff_service
from autometer.api.schemas import HealthResponse
from autometer.infrastructure.sessions import SessionRegistry
from autometer.infrastructure.tariff_service import TariffService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    registry: SessionRegistry = Depends(get_registry),
    service: TariffService = Depends(get_tariff_service),
):
    return HealthResponse(
        active_sessions=len(registry), tariff_version=service.cell.version
    )
