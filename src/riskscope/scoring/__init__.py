# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Risk scoring and treatment-policy compliance."""

from riskscope.scoring.calculator import (
    DEFAULT_THRESHOLDS,
    LevelThresholds,
    compute_mitigated_score,
    compute_score,
    get_configured_thresholds,
    reset_configured_thresholds,
    risk_level,
    score_assessment,
)
from riskscope.scoring.compliance import ComplianceEvaluator, evaluate, mitigation_complete

__all__ = [
    "DEFAULT_THRESHOLDS",
    "ComplianceEvaluator",
    "LevelThresholds",
    "compute_mitigated_score",
    "compute_score",
    "evaluate",
    "get_configured_thresholds",
    "mitigation_complete",
    "reset_configured_thresholds",
    "risk_level",
    "score_assessment",
]
