# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Caching decorator around any embedding provider."""

from __future__ import annotations

import logging

from riskscope.cache.manager import EmbeddingCache
from riskscope.embeddings.base import EmbeddingProvider

logger = logging.getLogger("riskscope.embeddings.cached")


class CachedEmbeddingProvider(EmbeddingProvider):
    """Serves repeat texts from an :class:`EmbeddingCache`.

    Cache failures never fail an embedding: a broken cache read falls
    through to the wrapped provider and a broken write is logged.
    """

    def __init__(self, inner: EmbeddingProvider, cache: EmbeddingCache) -> None:
        self._inner = inner
        self._cache = cache

    @property
    def dimension(self) -> int:
        return self._inner.dimension

    @property
    def model_id(self) -> str:
        return self._inner.model_id

    @property
    def cache(self) -> EmbeddingCache:
        return self._cache

    async def embed(self, text: str) -> list[float]:
        if not text.strip():
            return self.zero_vector()

        try:
            cached = await self._cache.lookup(self.model_id, text)
        except Exception:
            logger.warning("Embedding cache lookup failed", exc_info=True)
            cached = None
        if cached is not None and len(cached) == self.dimension:
            return cached

        vector = await self._inner.embed(text)

        try:
            await self._cache.store(self.model_id, text, vector)
        except Exception:
            logger.warning("Failed to cache embedding", exc_info=True)
        return vector

    async def close(self) -> None:
        await self._inner.close()
        await self._cache.close()
