# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Embedding providers that turn risk text into vectors."""

from riskscope.embeddings.base import EmbeddingProvider
from riskscope.embeddings.cached import CachedEmbeddingProvider
from riskscope.embeddings.factory import build_embedding_provider
from riskscope.embeddings.hashing import HashingEmbeddingProvider

__all__ = [
    "CachedEmbeddingProvider",
    "EmbeddingProvider",
    "HashingEmbeddingProvider",
    "build_embedding_provider",
]
