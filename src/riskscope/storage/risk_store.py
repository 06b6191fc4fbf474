# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SQLite-backed corpus source and risk reader."""

from __future__ import annotations

import logging

import aiosqlite

from riskscope.core.exceptions import StorageError
from riskscope.models.risk import CorpusEntry, RiskAssessment
from riskscope.sources.base import CorpusSource, RiskReader
from riskscope.storage.repositories.risks import RiskRepository

logger = logging.getLogger("riskscope.storage.risk_store")


class SqliteRiskStore(CorpusSource, RiskReader):
    """Reads the ``risks`` table. Archived rows never enter the corpus."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._repo = RiskRepository(db)

    @property
    def repository(self) -> RiskRepository:
        return self._repo

    async def fetch_corpus(self, exclude_id: str | None = None) -> list[CorpusEntry]:
        try:
            rows = await self._repo.list_active(exclude_id)
        except aiosqlite.Error as exc:
            raise StorageError(f"Failed to read risk corpus: {exc}") from exc
        return [CorpusEntry.model_validate(row) for row in rows]

    async def count(self, exclude_id: str | None = None) -> int:
        try:
            return await self._repo.count_active(exclude_id)
        except aiosqlite.Error as exc:
            raise StorageError(f"Failed to count risk corpus: {exc}") from exc

    async def get_risk_by_id(self, risk_id: str) -> RiskAssessment | None:
        try:
            row = await self._repo.get_by_id(risk_id)
        except aiosqlite.Error as exc:
            raise StorageError(f"Failed to read risk {risk_id}: {exc}") from exc
        if row is None:
            return None
        row["mitigation_implemented"] = bool(row.get("mitigation_implemented"))
        row["archived"] = bool(row.get("archived"))
        return RiskAssessment.model_validate(row)
