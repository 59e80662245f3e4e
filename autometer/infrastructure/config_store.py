"""
Key-value configuration store on Redis.

Values are whole-record JSON documents; every write replaces the record,
so readers never observe a partially written tariff.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

from autometer.config import settings

logger = logging.getLogger(__name__)


class RedisConfigurationStore:
    def __init__(
        self,
        client: Optional[aioredis.Redis] = None,
        namespace: str = "autometer",
        url: Optional[str] = None,
    ):
        self._client = client
        self.namespace = namespace
        self.url = url or settings.redis_url

    async def _redis(self) -> aioredis.Redis:
        if self._client is None:
            pool = aioredis.ConnectionPool.from_url(self.url, decode_responses=True)
            self._client = aioredis.Redis(connection_pool=pool)
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None when absent or not valid JSON."""
        raw = await (await self._redis()).get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed value under %s", self._key(key))
            return None

    async def set(self, key: str, value: Any) -> None:
        await (await self._redis()).set(self._key(key), json.dumps(value))


class InMemoryConfigurationStore:
    """Process-local store for single-instance deployments and tests."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {
            k: json.dumps(v) for k, v in (initial or {}).items()
        }

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
