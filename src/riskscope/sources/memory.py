# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-process risk store backing both read interfaces."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from riskscope.core.exceptions import ValidationError
from riskscope.models.risk import CorpusEntry, RiskAssessment
from riskscope.sources.base import CorpusSource, RiskReader


class InMemoryRiskStore(CorpusSource, RiskReader):
    """Dict-backed store, insertion ordered. Archived risks are kept but
    excluded from the corpus."""

    def __init__(self, risks: Iterable[RiskAssessment] = ()) -> None:
        self._risks: dict[str, RiskAssessment] = {}
        for risk in risks:
            self.add(risk)

    def add(self, risk: RiskAssessment) -> None:
        self._risks[risk.id] = risk

    def remove(self, risk_id: str) -> None:
        self._risks.pop(risk_id, None)

    def __len__(self) -> int:
        return len(self._risks)

    def _active(self, exclude_id: str | None) -> list[RiskAssessment]:
        return [r for r in self._risks.values() if not r.archived and r.id != exclude_id]

    async def fetch_corpus(self, exclude_id: str | None = None) -> list[CorpusEntry]:
        return [r.to_corpus_entry() for r in self._active(exclude_id)]

    async def count(self, exclude_id: str | None = None) -> int:
        return len(self._active(exclude_id))

    async def get_risk_by_id(self, risk_id: str) -> RiskAssessment | None:
        return self._risks.get(risk_id)


def load_risks(path: Path | str) -> list[RiskAssessment]:
    """Read risks from a JSON file holding a list or ``{"risks": [...]}``.

    Keys may be camelCase or snake_case.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path}: invalid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("risks", [data])
    if not isinstance(data, list):
        raise ValidationError(f"{path}: expected a list of risks")
    try:
        return [RiskAssessment.model_validate(item) for item in data]
    except PydanticValidationError as exc:
        raise ValidationError(f"{path}: {exc}") from exc
