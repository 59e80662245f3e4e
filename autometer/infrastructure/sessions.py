"""In-process registry of live meter sessions, keyed by session id."""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from autometer.domain.distance import DistanceAccumulator
from autometer.domain.entities import MeterSession
from autometer.domain.session import MeterController
from autometer.domain.tariff import TariffCell

from .position import PushPositionSource

logger = logging.getLogger(__name__)


class SessionNotFound(LookupError):
    """No meter session with the given id."""


class SessionRegistry:
    def __init__(
        self,
        tariffs: TariffCell,
        accumulator_factory: Callable[[], DistanceAccumulator] = DistanceAccumulator,
        **controller_kwargs,
    ):
        self._tariffs = tariffs
        self._accumulator_factory = accumulator_factory
        self._controller_kwargs = controller_kwargs
        self._controllers: dict[str, MeterController] = {}

    def __len__(self) -> int:
        return len(self._controllers)

    def create(self) -> MeterController:
        session_id = uuid.uuid4().hex
        controller = MeterController(
            PushPositionSource(),
            self._tariffs,
            session=MeterSession(id=session_id),
            accumulator=self._accumulator_factory(),
            **self._controller_kwargs,
        )
        self._controllers[session_id] = controller
        logger.info("Session %s created", session_id)
        return controller

    def get(self, session_id: str) -> MeterController:
        try:
            return self._controllers[session_id]
        except KeyError:
            raise SessionNotFound(f"Session {session_id} not found") from None

    async def discard(self, session_id: str) -> None:
        controller = self.get(session_id)
        del self._controllers[session_id]
        await controller.close()

    async def close_all(self) -> None:
        for session_id in list(self._controllers):
            await self.discard(session_id)
