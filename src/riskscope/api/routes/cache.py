# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Embedding cache management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from riskscope.api.auth import require_api_key
from riskscope.cache.manager import EmbeddingCache
from riskscope.embeddings.cached import CachedEmbeddingProvider

router = APIRouter(dependencies=[Depends(require_api_key)])


class CacheClearResponse(BaseModel):
    cleared: int
    message: str


class CacheStatsResponse(BaseModel):
    hits: int
    misses: int
    total: int
    hit_rate: float
    size: int


def _embedding_cache(request: Request) -> EmbeddingCache:
    embedder = request.app.state.coordinator.embedder
    if not isinstance(embedder, CachedEmbeddingProvider):
        raise HTTPException(status_code=404, detail="Embedding cache is disabled")
    return embedder.cache


@router.post("/cache/clear", response_model=CacheClearResponse)
async def clear_cache(
    request: Request,
) -> CacheClearResponse:
    """Flush cached embeddings."""
    count = await _embedding_cache(request).clear()
    return CacheClearResponse(cleared=count, message=f"Cleared {count} cached embeddings")


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(
    request: Request,
) -> CacheStatsResponse:
    cache = _embedding_cache(request)
    stats = cache.stats
    return CacheStatsResponse(
        hits=stats.hits,
        misses=stats.misses,
        total=stats.total,
        hit_rate=round(stats.hit_rate, 4),
        size=await cache.size(),
    )
