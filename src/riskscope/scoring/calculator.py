# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Risk score and level computation from CIA and likelihood factors."""

from __future__ import annotations

from dataclasses import dataclass

from riskscope.core.config import get_settings
from riskscope.core.constants import (
    FACTOR_MAX,
    FACTOR_MIN,
    LEVEL_THRESHOLD_HIGH,
    LEVEL_THRESHOLD_MEDIUM,
    RiskLevel,
)
from riskscope.core.exceptions import ValidationError
from riskscope.models.risk import RiskAssessment
from riskscope.models.score import RiskScores, ScoreResult


@dataclass(frozen=True, slots=True)
class LevelThresholds:
    """Inclusive lower bounds on ``risk_score`` for MEDIUM and HIGH."""

    medium: int = LEVEL_THRESHOLD_MEDIUM
    high: int = LEVEL_THRESHOLD_HIGH

    def __post_init__(self) -> None:
        if not self.medium < self.high:
            raise ValidationError(
                f"MEDIUM threshold ({self.medium}) must be below HIGH threshold ({self.high})"
            )

    @classmethod
    def from_settings(cls, settings: object) -> LevelThresholds:
        return cls(
            medium=getattr(settings, "level_medium_threshold", LEVEL_THRESHOLD_MEDIUM),
            high=getattr(settings, "level_high_threshold", LEVEL_THRESHOLD_HIGH),
        )


DEFAULT_THRESHOLDS = LevelThresholds()

_configured: LevelThresholds | None = None


def get_configured_thresholds() -> LevelThresholds:
    """Return the thresholds from ``RISKSCOPE_LEVEL_*`` settings.

    Read once on first call; every function here falls back to them when
    no explicit *thresholds* are passed.
    """
    global _configured
    if _configured is None:
        _configured = LevelThresholds.from_settings(get_settings())
    return _configured


def reset_configured_thresholds() -> None:
    """Reset the cached thresholds (useful for testing)."""
    global _configured
    _configured = None


def _check_factor(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if not FACTOR_MIN <= value <= FACTOR_MAX:
        raise ValidationError(
            f"{name} must be between {FACTOR_MIN} and {FACTOR_MAX}, got {value}"
        )
    return value


def risk_level(risk_score: int, thresholds: LevelThresholds | None = None) -> RiskLevel:
    """Map a risk score (3-75) to LOW / MEDIUM / HIGH.

    Uses the configured thresholds unless *thresholds* is given.
    """
    t = thresholds or get_configured_thresholds()
    if risk_score >= t.high:
        return RiskLevel.HIGH
    if risk_score >= t.medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def compute_score(
    confidentiality: int,
    integrity: int,
    availability: int,
    likelihood: int,
    *,
    thresholds: LevelThresholds | None = None,
) -> ScoreResult:
    """Compute ``risk = C + I + A`` and ``risk_score = risk * likelihood``.

    Raises:
        ValidationError: if any factor is not an integer in 1-5.
    """
    c = _check_factor("confidentiality", confidentiality)
    i = _check_factor("integrity", integrity)
    a = _check_factor("availability", availability)
    lk = _check_factor("likelihood", likelihood)

    risk = c + i + a
    risk_score = risk * lk
    return ScoreResult(risk=risk, risk_score=risk_score, level=risk_level(risk_score, thresholds))


def compute_mitigated_score(
    confidentiality: int | None,
    integrity: int | None,
    availability: int | None,
    likelihood: int | None,
    *,
    thresholds: LevelThresholds | None = None,
) -> ScoreResult | None:
    """Same as :func:`compute_score`, but undefined (``None``) if any input is unset."""
    if None in (confidentiality, integrity, availability, likelihood):
        return None
    return compute_score(
        confidentiality,  # type: ignore[arg-type]
        integrity,  # type: ignore[arg-type]
        availability,  # type: ignore[arg-type]
        likelihood,  # type: ignore[arg-type]
        thresholds=thresholds,
    )


def score_assessment(
    risk: RiskAssessment,
    thresholds: LevelThresholds | None = None,
) -> RiskScores:
    """Compute initial and mitigated scores for a stored assessment."""
    initial = compute_mitigated_score(
        risk.confidentiality,
        risk.integrity,
        risk.availability,
        risk.likelihood,
        thresholds=thresholds,
    )
    mitigated = compute_mitigated_score(*risk.mitigated_factors, thresholds=thresholds)
    return RiskScores(initial=initial, mitigated=mitigated)
