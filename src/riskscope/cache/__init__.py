# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Embedding vector caching layer."""

from riskscope.cache.manager import CacheStats, EmbeddingCache, build_embedding_cache

__all__ = ["CacheStats", "EmbeddingCache", "build_embedding_cache"]
