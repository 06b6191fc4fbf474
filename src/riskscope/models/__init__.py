# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for riskscope."""

from riskscope.models.compliance import ComplianceFinding, ComplianceReport
from riskscope.models.risk import CorpusEntry, RiskAssessment
from riskscope.models.score import RiskScores, ScoreResult
from riskscope.models.similarity import (
    ProgressUpdate,
    ScanCompleted,
    ScanFailed,
    ScanProgress,
    ScanUpdate,
    SimilarityCandidate,
)

__all__ = [
    "ComplianceFinding",
    "ComplianceReport",
    "CorpusEntry",
    "ProgressUpdate",
    "RiskAssessment",
    "RiskScores",
    "ScanCompleted",
    "ScanFailed",
    "ScanProgress",
    "ScanUpdate",
    "ScoreResult",
    "SimilarityCandidate",
]
