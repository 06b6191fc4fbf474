# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Similarity candidate, scan progress, and scan update models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from riskscope.models.risk import CamelModel


class SimilarityCandidate(BaseModel):
    """A corpus risk paired with its similarity to the query."""

    risk_id: str
    title: str
    score: float = Field(ge=0.0, le=100.0)
    matched_fields: list[str] = Field(default_factory=list)

    def to_wire(self) -> dict[str, object]:
        return {
            "risk": {"id": self.risk_id, "title": self.title},
            "score": round(self.score, 2),
            "fields": list(self.matched_fields),
        }


class ScanProgress(CamelModel):
    """Progress of one in-flight scan."""

    processed: int = 0
    total: int = 0
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)

    @classmethod
    def zero(cls) -> ScanProgress:
        return cls()


class ProgressUpdate(BaseModel):
    kind: Literal["progress"] = "progress"
    token: str
    progress: ScanProgress

    def to_wire(self) -> dict[str, object]:
        return {"type": self.kind, "token": self.token, "progress": self.progress.model_dump()}


class ScanCompleted(BaseModel):
    kind: Literal["completed"] = "completed"
    token: str
    progress: ScanProgress
    candidates: list[SimilarityCandidate] = Field(default_factory=list)

    def to_wire(self) -> dict[str, object]:
        return {
            "type": self.kind,
            "token": self.token,
            "progress": self.progress.model_dump(),
            "similarRisks": [c.to_wire() for c in self.candidates],
        }


class ScanFailed(BaseModel):
    kind: Literal["failed"] = "failed"
    token: str
    progress: ScanProgress
    error: str

    def to_wire(self) -> dict[str, object]:
        return {
            "type": self.kind,
            "token": self.token,
            "progress": self.progress.model_dump(),
            "error": self.error,
        }


ScanUpdate = ProgressUpdate | ScanCompleted | ScanFailed
