"""
Tariff endpoints
================

GET  /api/v1/tariff        -- current tariff (always re-read from the store)
PUT  /api/v1/tariff        -- replace the tariff (validated before saving)
POST /api/v1/tariff/reset  -- restore the default tariff
"""

from fastapi import APIRouter, Depends, Request

from autometer.api.dependencies import get_tariff_service
from autometer.api.middleware import limiter
from autometer.api.schemas import TariffRequest, TariffResponse
from autometer.config import settings
from autometer.infrastructure.tariff_service import TariffService

router = APIRouter(prefix="/tariff", tags=["tariff"])


@router.get("", response_model=TariffResponse, summary="Get the current tariff")
@limiter.limit(settings.rate_limit)
async def get_tariff(
    request: Request,
    service: TariffService = Depends(get_tariff_service),
):
    tariff = await service.load()
    return TariffResponse.from_domain(tariff, service.cell.version)


@router.put(
    "",
    response_model=TariffResponse,
    summary="Replace the tariff",
    responses={422: {"description": "A value is not positive or out of range."}},
)
@limiter.limit(settings.rate_limit)
async def put_tariff(
    request: Request,
    body: TariffRequest,
    service: TariffService = Depends(get_tariff_service),
):
    tariff = await service.save(body.to_domain())
    return TariffResponse.from_domain(tariff, service.cell.version)


@router.post(
    "/reset",
    response_model=TariffResponse,
    summary="Restore the default tariff",
)
@limiter.limit(settings.rate_limit)
async def reset_tariff(
    request: Request,
    service: TariffService = Depends(get_tariff_service),
):
    tariff = await service.reset_to_defaults()
    return TariffResponse.from_domain(tariff, service.cell.version)
