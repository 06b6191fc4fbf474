# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Versioned schema migrations for the risk register database.

Applied versions are tracked in a ``schema_migrations`` table; each
migration is idempotent and recorded once it has run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import aiosqlite

logger = logging.getLogger("riskscope.storage.migrations")

MigrationFunc = Callable[[aiosqlite.Connection], Coroutine[Any, Any, None]]


@dataclass(frozen=True, slots=True)
class Migration:
    """A single database migration."""

    version: int
    name: str
    func: MigrationFunc


# Ordered; new migrations are appended.
_MIGRATIONS: list[Migration] = []


def _register(version: int, name: str) -> Callable[[MigrationFunc], MigrationFunc]:
    def decorator(fn: MigrationFunc) -> MigrationFunc:
        _MIGRATIONS.append(Migration(version=version, name=name, func=fn))
        return fn

    return decorator


_CREATE_SCHEMA_MIGRATIONS = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


async def get_current_version(db: aiosqlite.Connection) -> int:
    """Return the highest applied migration version, or 0 if none."""
    await db.execute(_CREATE_SCHEMA_MIGRATIONS)
    await db.commit()
    cursor = await db.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
    row = await cursor.fetchone()
    return int(row[0]) if row else 0


async def get_pending_migrations(db: aiosqlite.Connection) -> list[Migration]:
    current = await get_current_version(db)
    return [m for m in _MIGRATIONS if m.version > current]


async def run_migrations(db: aiosqlite.Connection) -> list[Migration]:
    """Run all pending migrations in order and return those applied."""
    applied: list[Migration] = []

    for migration in await get_pending_migrations(db):
        logger.info("Applying migration %03d: %s", migration.version, migration.name)
        await migration.func(db)
        await db.execute(
            "INSERT OR IGNORE INTO schema_migrations (version, name) VALUES (?, ?)",
            (migration.version, migration.name),
        )
        await db.commit()
        applied.append(migration)

    return applied


# =========================================================================
# Migration 001 -- risks table
# =========================================================================

_CREATE_RISKS = """
CREATE TABLE IF NOT EXISTS risks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    threat_description TEXT,
    description TEXT,
    confidentiality INTEGER CHECK (confidentiality BETWEEN 1 AND 5),
    integrity INTEGER CHECK (integrity BETWEEN 1 AND 5),
    availability INTEGER CHECK (availability BETWEEN 1 AND 5),
    likelihood INTEGER CHECK (likelihood BETWEEN 1 AND 5),
    mitigated_confidentiality INTEGER CHECK (mitigated_confidentiality BETWEEN 1 AND 5),
    mitigated_integrity INTEGER CHECK (mitigated_integrity BETWEEN 1 AND 5),
    mitigated_availability INTEGER CHECK (mitigated_availability BETWEEN 1 AND 5),
    mitigated_likelihood INTEGER CHECK (mitigated_likelihood BETWEEN 1 AND 5),
    initial_treatment TEXT,
    residual_treatment TEXT,
    existing_controls_description TEXT,
    mitigation_description TEXT,
    mitigation_implemented INTEGER NOT NULL DEFAULT 0,
    archived INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


@_register(1, "create_risks")
async def _migration_001(db: aiosqlite.Connection) -> None:
    await db.execute(_CREATE_RISKS)


# =========================================================================
# Migration 002 -- index for corpus scans (non-archived rows)
# =========================================================================


@_register(2, "index_risks_archived")
async def _migration_002(db: aiosqlite.Connection) -> None:
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_risks_archived ON risks(archived, created_at)"
    )
