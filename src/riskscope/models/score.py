# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Derived score models."""

from __future__ import annotations

from pydantic import BaseModel

from riskscope.core.constants import RiskLevel


class ScoreResult(BaseModel):
    """Score derived from one CIA + likelihood quadruple."""

    risk: int
    risk_score: int
    level: RiskLevel


class RiskScores(BaseModel):
    """Initial and mitigated scores for one assessment.

    ``mitigated`` is ``None`` when any mitigated factor is unset; that is
    an undefined score, not a LOW one.
    """

    initial: ScoreResult | None = None
    mitigated: ScoreResult | None = None

    def to_wire(self) -> dict[str, object]:
        """Flatten into the ``{risk, riskScore, level, mitigated*}`` shape."""
        out: dict[str, object] = {
            "risk": self.initial.risk if self.initial else None,
            "riskScore": self.initial.risk_score if self.initial else None,
            "level": str(self.initial.level) if self.initial else None,
        }
        if self.mitigated is not None:
            out["mitigatedRisk"] = self.mitigated.risk
            out["mitigatedRiskScore"] = self.mitigated.risk_score
            out["mitigatedLevel"] = str(self.mitigated.level)
        return out
