# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Risk assessment and corpus entry models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from riskscope.core.constants import FACTOR_MAX, FACTOR_MIN, TreatmentCategory

_FACTOR_FIELDS = (
    "confidentiality",
    "integrity",
    "availability",
    "likelihood",
    "mitigated_confidentiality",
    "mitigated_integrity",
    "mitigated_availability",
    "mitigated_likelihood",
)


class CamelModel(BaseModel):
    """Base model that accepts and emits the camelCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CorpusEntry(CamelModel):
    """The text fields of a risk used for similarity comparison."""

    id: str
    title: str
    threat_description: str | None = None
    description: str | None = None


class RiskAssessment(CamelModel):
    """A scored risk as read from the register.

    Factors are integers 1-5 when set. The mitigated triple may be
    partially set while a user is still editing; such a risk never counts
    as having a complete mitigation.
    """

    id: str
    title: str = ""
    threat_description: str | None = None
    description: str | None = None

    confidentiality: int | None = None
    integrity: int | None = None
    availability: int | None = None
    likelihood: int | None = None

    mitigated_confidentiality: int | None = None
    mitigated_integrity: int | None = None
    mitigated_availability: int | None = None
    mitigated_likelihood: int | None = None

    initial_treatment: TreatmentCategory | None = None
    residual_treatment: TreatmentCategory | None = None

    existing_controls_description: str | None = None
    mitigation_description: str | None = None
    mitigation_implemented: bool = False

    archived: bool = Field(default=False, exclude=True)

    @field_validator(*_FACTOR_FIELDS, mode="before")
    @classmethod
    def _check_factor(cls, v: object) -> object:
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"factor must be an integer {FACTOR_MIN}-{FACTOR_MAX}, got {v!r}")
        if not FACTOR_MIN <= v <= FACTOR_MAX:
            raise ValueError(f"factor must be between {FACTOR_MIN} and {FACTOR_MAX}, got {v}")
        return v

    @field_validator("initial_treatment", "residual_treatment", mode="before")
    @classmethod
    def _blank_treatment_is_unset(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def mitigated_factors(self) -> tuple[int | None, int | None, int | None, int | None]:
        return (
            self.mitigated_confidentiality,
            self.mitigated_integrity,
            self.mitigated_availability,
            self.mitigated_likelihood,
        )

    def to_corpus_entry(self) -> CorpusEntry:
        return CorpusEntry(
            id=self.id,
            title=self.title,
            threat_description=self.threat_description,
            description=self.description,
        )
