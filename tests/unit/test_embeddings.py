# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the embedding providers and provider factory."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from riskscope.cache.manager import EmbeddingCache
from riskscope.core.exceptions import ConfigurationError, UpstreamUnavailable
from riskscope.embeddings import (
    CachedEmbeddingProvider,
    HashingEmbeddingProvider,
    build_embedding_provider,
)
from riskscope.embeddings.ollama import OllamaEmbeddingProvider
from riskscope.similarity.index import cosine_similarity

OLLAMA_URL = "http://ollama.test:11434/api/embeddings"


# ---------------------------------------------------------------------------
# HashingEmbeddingProvider
# ---------------------------------------------------------------------------
class TestHashingEmbeddingProvider:
    async def test_deterministic_and_normalised(self) -> None:
        provider = HashingEmbeddingProvider(dimension=64)
        first = await provider.embed("Unauthorized database access")
        assert first == await provider.embed("Unauthorized database access")
        assert len(first) == 64
        assert sum(v * v for v in first) == pytest.approx(1.0)

    async def test_blank_text_is_zero_vector(self) -> None:
        provider = HashingEmbeddingProvider(dimension=16)
        assert await provider.embed("   ") == [0.0] * 16

    async def test_shared_vocabulary_is_closer(self) -> None:
        provider = HashingEmbeddingProvider(dimension=256)
        a = await provider.embed("Phishing email steals staff credentials")
        b = await provider.embed("Phishing email harvests credentials")
        c = await provider.embed("River flood damages warehouse")
        assert cosine_similarity(a, b) > cosine_similarity(a, c)

    def test_rejects_bad_dimension(self) -> None:
        with pytest.raises(ValueError):
            HashingEmbeddingProvider(dimension=0)


# ---------------------------------------------------------------------------
# OllamaEmbeddingProvider
# ---------------------------------------------------------------------------
class TestOllamaEmbeddingProvider:
    @pytest.fixture
    def provider(self) -> OllamaEmbeddingProvider:
        return OllamaEmbeddingProvider(
            base_url="http://ollama.test:11434/", model="nomic-embed-text", dimension=3
        )

    @respx.mock
    async def test_success(self, provider) -> None:
        route = respx.post(OLLAMA_URL).mock(
            return_value=httpx.Response(200, json={"embedding": [0.1, 0.2, 0.3]})
        )
        assert await provider.embed("Title: Phishing") == [0.1, 0.2, 0.3]
        assert route.called
        assert json.loads(route.calls[0].request.content) == {
            "model": "nomic-embed-text",
            "prompt": "Title: Phishing",
        }
        await provider.close()

    @respx.mock
    async def test_blank_text_makes_no_request(self, provider) -> None:
        assert await provider.embed("") == [0.0, 0.0, 0.0]
        assert not respx.calls

    @respx.mock
    async def test_http_error(self, provider) -> None:
        respx.post(OLLAMA_URL).mock(return_value=httpx.Response(500, text="model not loaded"))
        with pytest.raises(UpstreamUnavailable, match="HTTP 500"):
            await provider.embed("text")

    @respx.mock
    async def test_connection_error(self, provider) -> None:
        respx.post(OLLAMA_URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(UpstreamUnavailable, match="unreachable"):
            await provider.embed("text")

    @respx.mock
    async def test_dimension_mismatch(self, provider) -> None:
        respx.post(OLLAMA_URL).mock(
            return_value=httpx.Response(200, json={"embedding": [0.1, 0.2]})
        )
        with pytest.raises(UpstreamUnavailable, match="2 dimensions"):
            await provider.embed("text")

    @respx.mock
    async def test_missing_embedding(self, provider) -> None:
        respx.post(OLLAMA_URL).mock(return_value=httpx.Response(200, json={"error": "no"}))
        with pytest.raises(UpstreamUnavailable):
            await provider.embed("text")


# ---------------------------------------------------------------------------
# CachedEmbeddingProvider
# ---------------------------------------------------------------------------
class TestCachedEmbeddingProvider:
    async def test_second_call_is_served_from_cache(self, embedder_factory) -> None:
        inner = embedder_factory({"Phishing": [1.0, 0.0, 0.0]})
        provider = CachedEmbeddingProvider(inner, EmbeddingCache())
        assert await provider.embed("Title: Phishing") == [1.0, 0.0, 0.0]
        assert await provider.embed("Title: Phishing") == [1.0, 0.0, 0.0]
        assert inner.calls == ["Title: Phishing"]
        assert provider.cache.stats.hits == 1

    async def test_failures_are_not_cached(self, embedder_factory) -> None:
        inner = embedder_factory(failures=1)
        provider = CachedEmbeddingProvider(inner, EmbeddingCache())
        with pytest.raises(UpstreamUnavailable):
            await provider.embed("text")
        assert await provider.embed("text") == [0.0, 0.0, 1.0]
        assert len(inner.calls) == 2

    async def test_close_closes_inner(self, embedder_factory) -> None:
        inner = embedder_factory()
        await CachedEmbeddingProvider(inner, EmbeddingCache()).close()
        assert inner.closed


# ---------------------------------------------------------------------------
# build_embedding_provider
# ---------------------------------------------------------------------------
class TestBuildEmbeddingProvider:
    def test_default_is_hashing(self, fast_settings) -> None:
        provider = build_embedding_provider(fast_settings)
        assert isinstance(provider, HashingEmbeddingProvider)
        assert provider.dimension == fast_settings.embedding_dimension

    def test_cache_wraps_provider(self, fast_settings) -> None:
        settings = fast_settings.model_copy(update={"embedding_cache": True})
        provider = build_embedding_provider(settings)
        assert isinstance(provider, CachedEmbeddingProvider)

    async def test_ollama(self, fast_settings) -> None:
        settings = fast_settings.model_copy(update={"embedding_provider": "OLLAMA"})
        provider = build_embedding_provider(settings)
        assert isinstance(provider, OllamaEmbeddingProvider)
        assert provider.model_id == "ollama:nomic-embed-text"
        await provider.close()

    def test_unknown_provider(self, fast_settings) -> None:
        settings = fast_settings.model_copy(update={"embedding_provider": "word2vec"})
        with pytest.raises(ConfigurationError, match="word2vec"):
            build_embedding_provider(settings)
