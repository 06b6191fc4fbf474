# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cosine-similarity ranking over an embedded risk corpus.

Scores are cosine similarity rescaled to 0-100 as ``100 * (1 + cos) / 2``:
identical vectors score 100, orthogonal vectors 50, opposite vectors 0.
A zero vector (the embedding of empty text) has no direction and scores 50
against everything.

Ranking is a linear scan. Corpora larger than ``shard_size`` are split
into shards that are scored on a thread pool; each shard's top-k is
merged back in (score desc, corpus position asc) order, so sharded and
linear output are identical.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from riskscope.core.exceptions import ValidationError
from riskscope.models.risk import CorpusEntry
from riskscope.models.similarity import SimilarityCandidate

logger = logging.getLogger("riskscope.similarity.index")


@dataclass(frozen=True, slots=True)
class IndexedRisk:
    """A corpus member and its embedding."""

    entry: CorpusEntry
    vector: Sequence[float]


# (negated score, corpus position, candidate): natural tuple order is rank order.
_Ranked = tuple[float, int, SimilarityCandidate]


def _sq_norm(vector: Sequence[float]) -> float:
    return math.fsum(v * v for v in vector)


def _cosine(a: Sequence[float], b: Sequence[float], a_sq_norm: float) -> float:
    # sqrt of the product of squared norms keeps cos(v, v) exactly 1.0
    denominator = math.sqrt(a_sq_norm * _sq_norm(b))
    if denominator == 0.0:
        return 0.0
    cosine = math.fsum(x * y for x, y in zip(a, b, strict=True)) / denominator
    return min(1.0, max(-1.0, cosine))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*; 0.0 if either has zero norm."""
    if len(a) != len(b):
        raise ValidationError(f"Vector dimensions differ: {len(a)} != {len(b)}")
    return _cosine(a, b, _sq_norm(a))


def to_score(cosine: float) -> float:
    """Map cosine similarity [-1, 1] onto [0, 100]."""
    return min(100.0, max(0.0, 100.0 * (1.0 + cosine) / 2.0))


class SimilarityIndex:
    """Ranks and thresholds corpus members against a query vector.

    Parameters
    ----------
    shard_size:
        Corpus size above which scoring is split across worker threads.
    max_workers:
        Thread pool size for sharded scoring.
    """

    def __init__(self, shard_size: int = 2000, max_workers: int = 4) -> None:
        if shard_size <= 0:
            raise ValueError("shard_size must be positive")
        self.shard_size = shard_size
        self.max_workers = max(1, max_workers)

    def _score_shard(
        self,
        query: Sequence[float],
        query_sq_norm: float,
        shard: Sequence[IndexedRisk],
        offset: int,
    ) -> list[_Ranked]:
        ranked: list[_Ranked] = []
        for position, member in enumerate(shard, start=offset):
            if len(member.vector) != len(query):
                raise ValidationError(
                    f"Risk {member.entry.id} has dimension {len(member.vector)}, "
                    f"query has {len(query)}"
                )
            score = to_score(_cosine(query, member.vector, query_sq_norm))
            candidate = SimilarityCandidate(
                risk_id=member.entry.id,
                title=member.entry.title,
                score=score,
            )
            ranked.append((-score, position, candidate))
        return ranked

    def _scored(
        self, query: Sequence[float], corpus: Sequence[IndexedRisk], top: int | None
    ) -> list[_Ranked]:
        """Rank-ordered entries, truncated to *top* when given."""
        query_sq_norm = _sq_norm(query)
        if len(corpus) <= self.shard_size:
            ranked = self._score_shard(query, query_sq_norm, corpus, 0)
            ranked.sort()
            return ranked if top is None else ranked[:top]

        shards = [
            (corpus[start : start + self.shard_size], start)
            for start in range(0, len(corpus), self.shard_size)
        ]
        logger.debug(
            "Scoring %d risks in %d shards (%d workers)",
            len(corpus),
            len(shards),
            self.max_workers,
        )

        def run(shard: Sequence[IndexedRisk], offset: int) -> list[_Ranked]:
            partial = self._score_shard(query, query_sq_norm, shard, offset)
            partial.sort()
            return partial if top is None else partial[:top]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            partials = list(pool.map(lambda s: run(*s), shards))

        merged = heapq.merge(*partials)
        if top is not None:
            merged = itertools.islice(merged, top)
        return list(merged)

    def score_all(
        self, query: Sequence[float], corpus: Sequence[IndexedRisk]
    ) -> list[SimilarityCandidate]:
        """Every member's score, in corpus order."""
        ranked = self._score_shard(query, _sq_norm(query), corpus, 0)
        return [candidate for _, _, candidate in ranked]

    def rank(
        self,
        query: Sequence[float],
        corpus: Sequence[IndexedRisk],
        limit: int,
    ) -> list[SimilarityCandidate]:
        """Top *limit* members by score; ties keep corpus order."""
        if limit <= 0 or not corpus:
            return []
        return [candidate for _, _, candidate in self._scored(query, corpus, limit)]

    def threshold(
        self,
        query: Sequence[float],
        corpus: Sequence[IndexedRisk],
        min_score: float,
    ) -> list[SimilarityCandidate]:
        """All members scoring at least *min_score*, in rank order."""
        if not corpus:
            return []
        return [
            candidate
            for _, _, candidate in self._scored(query, corpus, None)
            if candidate.score >= min_score
        ]
