# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Deterministic feature-hashing embedder.

Needs no model or network access, so it is the default for development
and tests. Words and their character trigrams are hashed into signed
buckets and the result is L2-normalised. Texts sharing vocabulary land
close together; it does not capture synonyms the way a trained model does.
"""

from __future__ import annotations

import hashlib
import math
import re

from riskscope.embeddings.base import EmbeddingProvider

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_TRIGRAM_WEIGHT = 0.5


def _tokens(text: str) -> list[str]:
    return [t for t in _TOKEN_RE.findall(text.lower()) if len(t) > 1]


def _trigrams(word: str) -> list[str]:
    padded = f"#{word}#"
    return [padded[i : i + 3] for i in range(len(padded) - 2)]


class HashingEmbeddingProvider(EmbeddingProvider):
    """Bag-of-words embedder using sha256 bucket hashing."""

    def __init__(self, dimension: int = 768) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_id(self) -> str:
        return f"hashing-{self._dimension}"

    def _bucket(self, feature: str) -> tuple[int, float]:
        digest = hashlib.sha256(feature.encode("utf-8")).digest()
        index = int.from_bytes(digest[:8], "big") % self._dimension
        sign = 1.0 if digest[8] & 1 else -1.0
        return index, sign

    def embed_sync(self, text: str) -> list[float]:
        vector = [0.0] * self._dimension
        for word in _tokens(text):
            index, sign = self._bucket(f"w:{word}")
            vector[index] += sign
            for gram in _trigrams(word):
                index, sign = self._bucket(f"c:{gram}")
                vector[index] += sign * _TRIGRAM_WEIGHT

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0.0:
            return vector
        return [v / norm for v in vector]

    async def embed(self, text: str) -> list[float]:
        return self.embed_sync(text)
