"""
Meter endpoints
===============

POST   /api/v1/meter/sessions                        -- create an idle meter
GET    /api/v1/meter/sessions/{id}                   -- current reading
POST   /api/v1/meter/sessions/{id}/start             -- start GPS metering
POST   /api/v1/meter/sessions/{id}/start-manual      -- start with typed distance
POST   /api/v1/meter/sessions/{id}/positions         -- push one position fix
POST   /api/v1/meter/sessions/{id}/position-error    -- report a stream failure
POST   /api/v1/meter/sessions/{id}/manual-distance   -- set distance by hand
POST   /api/v1/meter/sessions/{id}/stop              -- freeze the reading
POST   /api/v1/meter/sessions/{id}/reset             -- zero everything
DELETE /api/v1/meter/sessions/{id}                   -- discard the session
"""

from fastapi import APIRouter, Depends, Request, Response

from autometer.api.dependencies import get_controller, get_registry
from autometer.api.middleware import limiter
from autometer.api.schemas import (
    ManualDistanceRequest,
    PositionErrorRequest,
    PositionRequest,
    SessionResponse,
    StartRequest,
)
from autometer.config import settings
from autometer.domain.entities import PositionSample
from autometer.domain.enums import DistanceSource
from autometer.domain.errors import InvalidStateTransition
from autometer.domain.session import MeterController
from autometer.infrastructure.sessions import SessionRegistry

router = APIRouter(prefix="/meter/sessions", tags=["meter"])


def _snapshot(request: Request, controller: MeterController) -> SessionResponse:
    return SessionResponse.from_session(
        controller.snapshot(), request.app.state.settings.currency_symbol
    )


def _require_gps_stream(controller: MeterController) -> None:
    s = controller.session
    if not s.is_tracking or s.source is not DistanceSource.GPS:
        raise InvalidStateTransition("Meter is not tracking position")


@router.post(
    "",
    status_code=201,
    response_model=SessionResponse,
    summary="Create an idle meter session",
)
@limiter.limit(settings.rate_limit)
async def create_session(
    request: Request,
    registry: SessionRegistry = Depends(get_registry),
):
    return _snapshot(request, registry.create())


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get the current meter reading",
)
@limiter.limit(settings.rate_limit)
async def get_session(
    request: Request,
    controller: MeterController = Depends(get_controller),
):
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/start",
    response_model=SessionResponse,
    summary="Start metering from position fixes",
    responses={403: {"description": "Permission denied; use start-manual."}},
)
@limiter.limit(settings.rate_limit)
async def start_session(
    request: Request,
    body: StartRequest,
    controller: MeterController = Depends(get_controller),
):
    controller.source.grant(body.permission_granted)
    await controller.start()
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/start-manual",
    response_model=SessionResponse,
    summary="Start metering with manually entered distance",
)
@limiter.limit(settings.rate_limit)
async def start_manual_session(
    request: Request,
    controller: MeterController = Depends(get_controller),
):
    await controller.start_manual()
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/positions",
    status_code=202,
    response_model=SessionResponse,
    summary="Push a position fix",
    description=(
        "Fixes are applied in arrival order by the session's stream "
        "consumer; the returned reading may not include this fix yet."
    ),
)
async def push_position(
    request: Request,
    body: PositionRequest,
    controller: MeterController = Depends(get_controller),
):
    _require_gps_stream(controller)
    controller.source.push(
        PositionSample(body.latitude, body.longitude, body.timestamp_ms)
    )
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/position-error",
    status_code=202,
    response_model=SessionResponse,
    summary="Report that the device lost its position stream",
)
@limiter.limit(settings.rate_limit)
async def report_position_error(
    request: Request,
    body: PositionErrorRequest,
    controller: MeterController = Depends(get_controller),
):
    _require_gps_stream(controller)
    controller.source.fail(body.reason)
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/manual-distance",
    response_model=SessionResponse,
    summary="Set the distance by hand",
)
@limiter.limit(settings.rate_limit)
async def enter_manual_distance(
    request: Request,
    body: ManualDistanceRequest,
    controller: MeterController = Depends(get_controller),
):
    await controller.enter_manual_distance(body.distance_km)
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/stop",
    response_model=SessionResponse,
    summary="Stop the meter, keeping the last reading",
)
@limiter.limit(settings.rate_limit)
async def stop_session(
    request: Request,
    controller: MeterController = Depends(get_controller),
):
    await controller.stop()
    return _snapshot(request, controller)


@router.post(
    "/{session_id}/reset",
    response_model=SessionResponse,
    summary="Stop and zero the meter",
)
@limiter.limit(settings.rate_limit)
async def reset_session(
    request: Request,
    controller: MeterController = Depends(get_controller),
):
    await controller.reset()
    return _snapshot(request, controller)


@router.delete("/{session_id}", status_code=204, summary="Discard a session")
@limiter.limit(settings.rate_limit)
async def delete_session(
    request: Request,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    await registry.discard(session_id)
    return Response(status_code=204)
