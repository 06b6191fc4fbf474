# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scoring, compliance, and pre-save similarity check endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import Field

from riskscope.api.auth import require_api_key
from riskscope.core.exceptions import RiskNotFoundError
from riskscope.models.risk import CamelModel, RiskAssessment
from riskscope.models.score import RiskScores
from riskscope.scoring.calculator import (
    LevelThresholds,
    compute_mitigated_score,
    compute_score,
    score_assessment,
)
from riskscope.scoring.compliance import ComplianceEvaluator
from riskscope.similarity.coordinator import SimilarityScanCoordinator

router = APIRouter(dependencies=[Depends(require_api_key)])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ScoreRequestBody(CamelModel):
    confidentiality: int
    integrity: int
    availability: int
    likelihood: int
    mitigated_confidentiality: int | None = None
    mitigated_integrity: int | None = None
    mitigated_availability: int | None = None
    mitigated_likelihood: int | None = None


class CheckSimilarityBody(CamelModel):
    title: str = Field(default="")
    threat_description: str | None = None
    description: str | None = None
    exclude_id: str | None = None


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_coordinator(request: Request) -> SimilarityScanCoordinator:
    return request.app.state.coordinator  # type: ignore[no-any-return]


def get_thresholds(request: Request) -> LevelThresholds:
    return LevelThresholds.from_settings(request.app.state.settings)


async def load_risk(risk_id: str, request: Request) -> RiskAssessment:
    risk = await request.app.state.risk_reader.get_risk_by_id(risk_id)
    if risk is None:
        raise RiskNotFoundError(risk_id)
    return risk  # type: ignore[no-any-return]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/score")
async def score_factors(
    body: ScoreRequestBody,
    thresholds: LevelThresholds = Depends(get_thresholds),
) -> dict[str, Any]:
    """Score an unsaved set of factors."""
    initial = compute_score(
        body.confidentiality,
        body.integrity,
        body.availability,
        body.likelihood,
        thresholds=thresholds,
    )
    mitigated = compute_mitigated_score(
        body.mitigated_confidentiality,
        body.mitigated_integrity,
        body.mitigated_availability,
        body.mitigated_likelihood,
        thresholds=thresholds,
    )
    return RiskScores(initial=initial, mitigated=mitigated).to_wire()


@router.get("/risks/{risk_id}/score")
async def risk_score(
    risk: RiskAssessment = Depends(load_risk),
    thresholds: LevelThresholds = Depends(get_thresholds),
) -> dict[str, Any]:
    return score_assessment(risk, thresholds).to_wire()


@router.get("/risks/{risk_id}/compliance")
async def risk_compliance(
    risk: RiskAssessment = Depends(load_risk),
    thresholds: LevelThresholds = Depends(get_thresholds),
) -> dict[str, Any]:
    return ComplianceEvaluator(thresholds).evaluate(risk).to_wire()


@router.post("/risks/check-similarity")
async def check_similarity(
    body: CheckSimilarityBody,
    request: Request,
    coordinator: SimilarityScanCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    """Pre-save duplicate check. Never fails on upstream errors."""
    matches = await coordinator.check_similarity(
        body.title,
        body.threat_description,
        body.description,
        exclude_id=body.exclude_id,
        limit=request.app.state.settings.precheck_limit,
    )
    return {"similarRisks": [m.to_wire() for m in matches]}
