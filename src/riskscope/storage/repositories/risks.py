# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Repository for risk register rows."""

from __future__ import annotations

from typing import Any

import aiosqlite

from riskscope.models.risk import RiskAssessment

_COLUMNS = (
    "id",
    "title",
    "threat_description",
    "description",
    "confidentiality",
    "integrity",
    "availability",
    "likelihood",
    "mitigated_confidentiality",
    "mitigated_integrity",
    "mitigated_availability",
    "mitigated_likelihood",
    "initial_treatment",
    "residual_treatment",
    "existing_controls_description",
    "mitigation_description",
    "mitigation_implemented",
    "archived",
)


class RiskRepository:
    """Query and load risk rows."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, risk_id: str) -> dict[str, Any] | None:
        """Return a single risk row by ID, or None if not found."""
        cursor = await self._db.execute("SELECT * FROM risks WHERE id = ?", (risk_id,))
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def list_active(self, exclude_id: str | None = None) -> list[dict[str, Any]]:
        """Return the similarity fields of every non-archived risk, oldest first."""
        cursor = await self._db.execute(
            """
            SELECT id, title, threat_description, description FROM risks
            WHERE archived = 0 AND (? IS NULL OR id != ?)
            ORDER BY created_at, rowid
            """,
            (exclude_id, exclude_id),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def count_active(self, exclude_id: str | None = None) -> int:
        cursor = await self._db.execute(
            "SELECT COUNT(*) FROM risks WHERE archived = 0 AND (? IS NULL OR id != ?)",
            (exclude_id, exclude_id),
        )
        row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def upsert(self, risk: RiskAssessment) -> None:
        """Insert or replace a risk; used by ``riskscope db import``."""
        row = risk.model_dump(include=set(_COLUMNS))
        row["mitigation_implemented"] = int(risk.mitigation_implemented)
        row["archived"] = int(risk.archived)
        for key in ("initial_treatment", "residual_treatment"):
            if row[key] is not None:
                row[key] = str(row[key])
        placeholders = ", ".join(f":{c}" for c in _COLUMNS)
        updates = ", ".join(f"{c} = excluded.{c}" for c in _COLUMNS if c != "id")
        await self._db.execute(
            f"INSERT INTO risks ({', '.join(_COLUMNS)}) VALUES ({placeholders}) "  # noqa: S608
            f"ON CONFLICT(id) DO UPDATE SET {updates}, updated_at = datetime('now')",
            row,
        )
        await self._db.commit()

    async def upsert_many(self, risks: list[RiskAssessment]) -> int:
        for risk in risks:
            await self.upsert(risk)
        return len(risks)
