# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Public SDK interface for embedding riskscope in other tools.

Usage::

    from riskscope import check_similarity_sync, score

    scores = score(risk)
    print(scores.initial.level)

    matches = check_similarity_sync("Phishing of finance staff", risks)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from riskscope.core.config import Settings, get_settings
from riskscope.embeddings.base import EmbeddingProvider
from riskscope.embeddings.factory import build_embedding_provider
from riskscope.models.compliance import ComplianceReport
from riskscope.models.risk import RiskAssessment
from riskscope.models.score import RiskScores
from riskscope.models.similarity import SimilarityCandidate
from riskscope.scoring.calculator import LevelThresholds, score_assessment
from riskscope.scoring.compliance import ComplianceEvaluator
from riskscope.similarity.coordinator import SimilarityScanCoordinator
from riskscope.sources.memory import InMemoryRiskStore

logger = logging.getLogger("riskscope.sdk")


def _build_coordinator(
    risks: Iterable[RiskAssessment],
    *,
    settings: Settings,
    embedder: EmbeddingProvider | None,
) -> SimilarityScanCoordinator:
    store = InMemoryRiskStore(risks)
    return SimilarityScanCoordinator(
        store,
        store,
        embedder or build_embedding_provider(settings),
        settings=settings,
    )


def score(risk: RiskAssessment, *, settings: Settings | None = None) -> RiskScores:
    """Initial and mitigated scores using the configured level thresholds."""
    settings = settings or get_settings()
    return score_assessment(risk, LevelThresholds.from_settings(settings))


def evaluate_compliance(
    risk: RiskAssessment, *, settings: Settings | None = None
) -> ComplianceReport:
    settings = settings or get_settings()
    return ComplianceEvaluator(LevelThresholds.from_settings(settings)).evaluate(risk)


async def check_similarity(
    title: str,
    risks: Iterable[RiskAssessment],
    *,
    threat_description: str | None = None,
    description: str | None = None,
    exclude_id: str | None = None,
    limit: int | None = None,
    settings: Settings | None = None,
    embedder: EmbeddingProvider | None = None,
) -> list[SimilarityCandidate]:
    """Pre-save duplicate check of unsaved text against *risks*.

    Parameters
    ----------
    title:
        Title of the risk being drafted; shorter than the configured
        minimum means no check and no matches.
    risks:
        The register to compare against. Archived risks are ignored.
    embedder:
        Optional provider override; defaults to the configured one. A
        provider passed in is not closed.
    """
    settings = settings or get_settings()
    coordinator = _build_coordinator(risks, settings=settings, embedder=embedder)
    try:
        return await coordinator.check_similarity(
            title,
            threat_description,
            description,
            exclude_id=exclude_id,
            limit=limit,
        )
    finally:
        if embedder is None:
            await coordinator.embedder.close()


async def find_similar(
    risk_id: str,
    risks: Iterable[RiskAssessment],
    *,
    limit: int | None = None,
    settings: Settings | None = None,
    embedder: EmbeddingProvider | None = None,
) -> list[SimilarityCandidate]:
    """Rank *risks* by similarity to the risk with id *risk_id*.

    Raises :class:`~riskscope.core.exceptions.RiskNotFoundError` if
    *risk_id* is not among *risks*.
    """
    settings = settings or get_settings()
    coordinator = _build_coordinator(risks, settings=settings, embedder=embedder)
    try:
        return await coordinator.find_similar(risk_id, limit)
    finally:
        if embedder is None:
            await coordinator.embedder.close()


def check_similarity_sync(
    title: str, risks: Iterable[RiskAssessment], **kwargs: object
) -> list[SimilarityCandidate]:
    """Blocking wrapper around :func:`check_similarity`."""
    return asyncio.run(check_similarity(title, risks, **kwargs))  # type: ignore[arg-type]


def find_similar_sync(
    risk_id: str, risks: Iterable[RiskAssessment], **kwargs: object
) -> list[SimilarityCandidate]:
    """Blocking wrapper around :func:`find_similar`."""
    return asyncio.run(find_similar(risk_id, risks, **kwargs))  # type: ignore[arg-type]
