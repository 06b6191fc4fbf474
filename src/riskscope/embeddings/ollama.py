# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Embedding provider backed by an Ollama server's embeddings endpoint."""

from __future__ import annotations

import logging

import httpx

from riskscope.core.exceptions import UpstreamUnavailable
from riskscope.embeddings.base import EmbeddingProvider

logger = logging.getLogger("riskscope.embeddings.ollama")


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Calls ``POST {base_url}/api/embeddings`` with ``{"model", "prompt"}``.

    Parameters
    ----------
    base_url:
        Root URL of the Ollama server.
    model:
        An embedding-capable model, e.g. ``nomic-embed-text``.
    dimension:
        Expected vector length. Responses of any other length are
        rejected so a corpus never mixes dimensions.
    timeout:
        Per-request timeout in seconds.
    client:
        Optional pre-built ``httpx.AsyncClient`` (tests inject one).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        dimension: int = 768,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._dimension = dimension
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_id(self) -> str:
        return f"ollama:{self._model}"

    async def embed(self, text: str) -> list[float]:
        if not text.strip():
            return self.zero_vector()

        url = f"{self._base_url}/api/embeddings"
        try:
            response = await self._client.post(
                url, json={"model": self._model, "prompt": text}
            )
        except httpx.HTTPError as exc:
            logger.error("Embedding request to %s failed: %s", url, exc)
            raise UpstreamUnavailable(f"Embedding service unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "Embedding request failed: HTTP %d (model=%s): %s",
                response.status_code,
                self._model,
                response.text[:200],
            )
            raise UpstreamUnavailable(
                f"Embedding service returned HTTP {response.status_code}"
            )

        try:
            embedding = response.json().get("embedding")
        except ValueError as exc:
            raise UpstreamUnavailable("Embedding service returned invalid JSON") from exc

        if not isinstance(embedding, list) or not embedding:
            raise UpstreamUnavailable(
                f"Model {self._model!r} returned no embedding; is it an embedding model?"
            )
        if len(embedding) != self._dimension:
            raise UpstreamUnavailable(
                f"Model {self._model!r} returned {len(embedding)} dimensions, "
                f"expected {self._dimension}"
            )

        logger.debug("Embedded %d chars with %s", len(text), self._model)
        return [float(v) for v in embedding]

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
