# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Build the configured embedding provider from settings."""

from __future__ import annotations

import logging

from riskscope.core.config import Settings
from riskscope.core.constants import EmbeddingBackend
from riskscope.core.exceptions import ConfigurationError
from riskscope.embeddings.base import EmbeddingProvider
from riskscope.embeddings.hashing import HashingEmbeddingProvider

logger = logging.getLogger("riskscope.embeddings.factory")


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    try:
        backend = EmbeddingBackend(settings.embedding_provider.lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"Unknown embedding provider: {settings.embedding_provider!r}. "
            f"Expected one of: {', '.join(b.value for b in EmbeddingBackend)}"
        ) from exc

    provider: EmbeddingProvider
    if backend == EmbeddingBackend.OLLAMA:
        from riskscope.embeddings.ollama import OllamaEmbeddingProvider

        provider = OllamaEmbeddingProvider(
            base_url=settings.embedding_base_url,
            model=settings.embedding_model,
            dimension=settings.embedding_dimension,
            timeout=settings.embedding_timeout,
        )
    else:
        provider = HashingEmbeddingProvider(dimension=settings.embedding_dimension)

    if settings.embedding_cache:
        from riskscope.cache.manager import build_embedding_cache
        from riskscope.embeddings.cached import CachedEmbeddingProvider

        provider = CachedEmbeddingProvider(provider, build_embedding_cache(settings))

    logger.info(
        "Embedding provider: %s (dimension=%d, cache=%s)",
        provider.model_id,
        provider.dimension,
        settings.embedding_cache,
    )
    return provider
