# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Compliance finding models."""

from __future__ import annotations

from pydantic import BaseModel, computed_field

from riskscope.core.constants import FindingKind


class ComplianceFinding(BaseModel):
    """Outcome of one policy category for a risk."""

    kind: FindingKind = FindingKind.NONE
    reason: str = ""
    rule: str = ""

    @classmethod
    def none(cls) -> ComplianceFinding:
        return cls()

    @property
    def is_conformant(self) -> bool:
        return self.kind != FindingKind.NON_CONFORMANCE


class ComplianceReport(BaseModel):
    """Findings for the initial-treatment and residual/mitigation categories."""

    initial_treatment_finding: ComplianceFinding
    residual_treatment_finding: ComplianceFinding

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_non_conformance(self) -> bool:
        return FindingKind.NON_CONFORMANCE in (
            self.initial_treatment_finding.kind,
            self.residual_treatment_finding.kind,
        )

    def to_wire(self) -> dict[str, object]:
        return {
            "initialTreatmentFinding": self.initial_treatment_finding.model_dump(mode="json"),
            "residualTreatmentFinding": self.residual_treatment_finding.model_dump(mode="json"),
        }
