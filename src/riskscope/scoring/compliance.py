# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Treatment-category policy rules.

Two categories are evaluated independently and each yields exactly one
finding, first matching rule wins:

* **initial treatment**: RETAIN on a MEDIUM risk needs an existing-controls
  justification; every risk should have a treatment category at all.
* **residual / mitigation**: a MODIFY risk needs a complete Additional
  Controls Assessment (all four mitigated factors and a mitigation
  description). Missing it is a non-conformance for MEDIUM/HIGH and a
  recommendation for LOW.

RETAIN on a HIGH risk is not flagged; the policy only gates MEDIUM.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from riskscope.core.constants import FindingKind, RiskLevel, TreatmentCategory
from riskscope.models.compliance import ComplianceFinding, ComplianceReport
from riskscope.models.risk import RiskAssessment
from riskscope.scoring.calculator import LevelThresholds, score_assessment

logger = logging.getLogger("riskscope.scoring.compliance")

RULE_RETAIN_MEDIUM = "retain-medium-justification"
RULE_TREATMENT_MISSING = "treatment-missing"
RULE_MODIFY_INCOMPLETE = "modify-incomplete-assessment"
RULE_MODIFY_LOW_OPTIONAL = "modify-low-assessment-optional"


def _blank(text: str | None) -> bool:
    return text is None or not text.strip()


def mitigation_complete(risk: RiskAssessment) -> bool:
    """All four mitigated factors set and a non-blank mitigation description."""
    return None not in risk.mitigated_factors and not _blank(risk.mitigation_description)


class ComplianceEvaluator:
    """Evaluates a risk's treatment choice against policy."""

    def __init__(self, thresholds: LevelThresholds | None = None) -> None:
        self._thresholds = thresholds

    def evaluate(self, risk: RiskAssessment) -> ComplianceReport:
        scores = score_assessment(risk, self._thresholds)
        level = scores.initial.level if scores.initial else None
        return ComplianceReport(
            initial_treatment_finding=self._initial_treatment(risk, level),
            residual_treatment_finding=self._residual_treatment(risk, level),
        )

    def _initial_treatment(
        self, risk: RiskAssessment, level: RiskLevel | None
    ) -> ComplianceFinding:
        if (
            risk.initial_treatment == TreatmentCategory.RETAIN
            and level == RiskLevel.MEDIUM
            and _blank(risk.existing_controls_description)
        ):
            return ComplianceFinding(
                kind=FindingKind.RECOMMENDATION,
                reason=(
                    "Existing Controls Description must justify why Retain is "
                    "acceptable for a Medium risk"
                ),
                rule=RULE_RETAIN_MEDIUM,
            )
        if risk.initial_treatment is None:
            return ComplianceFinding(
                kind=FindingKind.RECOMMENDATION,
                reason="All risks should have an initial risk treatment category",
                rule=RULE_TREATMENT_MISSING,
            )
        return ComplianceFinding.none()

    def _residual_treatment(
        self, risk: RiskAssessment, level: RiskLevel | None
    ) -> ComplianceFinding:
        if risk.initial_treatment != TreatmentCategory.MODIFY:
            return ComplianceFinding.none()
        if mitigation_complete(risk):
            return ComplianceFinding.none()
        if level == RiskLevel.LOW:
            return ComplianceFinding(
                kind=FindingKind.RECOMMENDATION,
                reason=(
                    "MODIFY risk with LOW initial score: Additional Controls "
                    "Assessment is recommended but not required"
                ),
                rule=RULE_MODIFY_LOW_OPTIONAL,
            )
        # An unscored risk cannot show it is LOW, so it is held to the stricter rule.
        level_label = str(level) if level is not None else "UNSCORED"
        return ComplianceFinding(
            kind=FindingKind.NON_CONFORMANCE,
            reason=(
                f"MODIFY risk with {level_label} initial score requires complete "
                "Additional Controls Assessment"
            ),
            rule=RULE_MODIFY_INCOMPLETE,
        )

    def count_non_conformances(self, risks: Iterable[RiskAssessment]) -> int:
        """Number of risks carrying at least one NON_CONFORMANCE finding."""
        count = sum(1 for risk in risks if self.evaluate(risk).has_non_conformance)
        logger.debug("Counted %d non-conforming risks", count)
        return count


_default_evaluator = ComplianceEvaluator()


def evaluate(risk: RiskAssessment) -> ComplianceReport:
    """Evaluate *risk* with the configured ``RISKSCOPE_LEVEL_*`` thresholds."""
    return _default_evaluator.evaluate(risk)
