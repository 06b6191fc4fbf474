# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract vector cache backend with TTL support."""

from __future__ import annotations

import abc


class VectorCacheBackend(abc.ABC):
    """Stores embedding vectors under content-addressed keys.

    Backends support async get/set/delete with an optional TTL in seconds.
    """

    @abc.abstractmethod
    async def get(self, key: str) -> list[float] | None:
        """Return the cached vector, or ``None`` if missing or expired."""

    @abc.abstractmethod
    async def set(self, key: str, vector: list[float], ttl: int | None = None) -> None:
        """Store *vector*; ``ttl=None`` means no expiry."""

    @abc.abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove *key*, returning ``True`` if it existed."""

    @abc.abstractmethod
    async def clear(self) -> int:
        """Remove every entry and return how many were removed."""

    @abc.abstractmethod
    async def size(self) -> int:
        """Number of live (non-expired) entries."""

    async def close(self) -> None:
        """Release any resources held by the backend."""
