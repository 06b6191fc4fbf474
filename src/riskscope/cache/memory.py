# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-process LRU vector cache with per-entry expiry.

Default backend; vectors are kept as tuples so callers cannot mutate a
cached entry through a returned list.
"""

from __future__ import annotations

import time
from collections import OrderedDict

from riskscope.cache.base import VectorCacheBackend

_DEFAULT_MAX_SIZE = 10_000


class _Entry:
    __slots__ = ("expires_at", "vector")

    def __init__(self, vector: tuple[float, ...], expires_at: float | None) -> None:
        self.vector = vector
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class MemoryVectorCache(VectorCacheBackend):
    """LRU cache bounded by ``max_size`` entries."""

    def __init__(self, max_size: int = _DEFAULT_MAX_SIZE) -> None:
        self._store: OrderedDict[str, _Entry] = OrderedDict()
        self._max_size = max_size

    async def get(self, key: str) -> list[float] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(time.monotonic()):
            del self._store[key]
            return None
        self._store.move_to_end(key)
        return list(entry.vector)

    async def set(self, key: str, vector: list[float], ttl: int | None = None) -> None:
        expires_at = (time.monotonic() + ttl) if ttl is not None else None
        self._store[key] = _Entry(tuple(vector), expires_at)
        self._store.move_to_end(key)
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)

    async def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    async def clear(self) -> int:
        count = len(self._store)
        self._store.clear()
        return count

    async def size(self) -> int:
        now = time.monotonic()
        for key in [k for k, e in self._store.items() if e.is_expired(now)]:
            del self._store[key]
        return len(self._store)

    async def close(self) -> None:
        self._store.clear()
