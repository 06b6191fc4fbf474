# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract embedding provider interface."""

from __future__ import annotations

import abc


class EmbeddingProvider(abc.ABC):
    """Turns risk text into a fixed-length vector.

    Implementations must be deterministic (same text, same vector) and must
    return an all-zero vector for empty or whitespace-only text rather
    than failing.
    """

    @property
    @abc.abstractmethod
    def dimension(self) -> int:
        """Length of every vector returned by :meth:`embed`."""

    @property
    @abc.abstractmethod
    def model_id(self) -> str:
        """Identifier of the underlying model (used in cache keys)."""

    @abc.abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed *text*.

        Raises:
            UpstreamUnavailable: if a remote embedding service cannot be
                reached or returns an unusable response.
        """

    def zero_vector(self) -> list[float]:
        return [0.0] * self.dimension

    async def close(self) -> None:
        """Release any resources held by the provider."""
