# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Redis vector cache, shared between API workers.

Requires the ``redis`` extra (``pip install 'riskscope[redis]'``).
Vectors are stored as JSON arrays under a ``riskscope:emb:`` prefix.
"""

from __future__ import annotations

import json
import logging

import redis.asyncio as aioredis

from riskscope.cache.base import VectorCacheBackend

logger = logging.getLogger("riskscope.cache.redis")

_KEY_PREFIX = "riskscope:emb:"


class RedisVectorCache(VectorCacheBackend):
    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        client: aioredis.Redis | None = None,
    ) -> None:
        self._client = client or aioredis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> list[float] | None:
        raw = await self._client.get(self._prefixed(key))
        if raw is None:
            return None
        try:
            return [float(v) for v in json.loads(raw)]
        except (TypeError, ValueError):
            logger.warning("Discarding corrupt cache entry %s", key[:12])
            await self._client.delete(self._prefixed(key))
            return None

    async def set(self, key: str, vector: list[float], ttl: int | None = None) -> None:
        payload = json.dumps(vector, separators=(",", ":"))
        if ttl is not None:
            await self._client.setex(self._prefixed(key), ttl, payload)
        else:
            await self._client.set(self._prefixed(key), payload)

    async def delete(self, key: str) -> bool:
        return bool(await self._client.delete(self._prefixed(key)))

    async def clear(self) -> int:
        """Delete all prefixed keys using SCAN rather than KEYS."""
        count = 0
        async for key in self._client.scan_iter(match=f"{_KEY_PREFIX}*"):
            await self._client.delete(key)
            count += 1
        return count

    async def size(self) -> int:
        count = 0
        async for _key in self._client.scan_iter(match=f"{_KEY_PREFIX}*"):
            count += 1
        return count

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _prefixed(key: str) -> str:
        return f"{_KEY_PREFIX}{key}"
