# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Embedding cache: content-addressed keys, hit/miss statistics, backend selection.

:class:`EmbeddingCache` is the interface the embedding layer talks to. It
derives a deterministic key from the model id and the exact text, so a
cached vector is only reused for byte-identical input to the same model.
"""

from __future__ import annotations

import hashlib
import logging

from riskscope.cache.base import VectorCacheBackend
from riskscope.cache.memory import MemoryVectorCache
from riskscope.core.config import Settings
from riskscope.core.exceptions import ConfigurationError

logger = logging.getLogger("riskscope.cache.manager")


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("hits", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
        }


class EmbeddingCache:
    """Vector cache keyed by ``sha256(model_id + NUL + text)``.

    Args:
        backend: Storage backend; in-memory LRU when omitted.
        default_ttl: Expiry in seconds for stored vectors.
    """

    def __init__(
        self,
        backend: VectorCacheBackend | None = None,
        default_ttl: int | None = 86400,
    ) -> None:
        self._backend = backend or MemoryVectorCache()
        self._default_ttl = default_ttl
        self._stats = CacheStats()

    @staticmethod
    def make_key(model_id: str, text: str) -> str:
        payload = f"{model_id}\x00{text}"
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    async def lookup(self, model_id: str, text: str) -> list[float] | None:
        key = self.make_key(model_id, text)
        vector = await self._backend.get(key)
        if vector is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return vector

    async def store(self, model_id: str, text: str, vector: list[float]) -> None:
        key = self.make_key(model_id, text)
        await self._backend.set(key, vector, ttl=self._default_ttl)

    async def invalidate(self, model_id: str, text: str) -> bool:
        return await self._backend.delete(self.make_key(model_id, text))

    async def clear(self) -> int:
        count = await self._backend.clear()
        logger.info("Embedding cache cleared: %d entries removed", count)
        return count

    async def size(self) -> int:
        return await self._backend.size()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def backend(self) -> VectorCacheBackend:
        return self._backend

    async def close(self) -> None:
        await self._backend.close()


def build_embedding_cache(settings: Settings) -> EmbeddingCache:
    """Create the cache configured by ``RISKSCOPE_CACHE_BACKEND``."""
    backend_type = settings.cache_backend.lower()
    backend: VectorCacheBackend
    if backend_type == "memory":
        backend = MemoryVectorCache(max_size=settings.cache_max_size)
    elif backend_type == "redis":
        from riskscope.cache.redis import RedisVectorCache

        backend = RedisVectorCache(redis_url=settings.redis_url)
    else:
        raise ConfigurationError(
            f"Unknown cache backend: {settings.cache_backend!r}. Expected 'memory' or 'redis'."
        )
    return EmbeddingCache(backend=backend, default_ttl=settings.cache_ttl)
