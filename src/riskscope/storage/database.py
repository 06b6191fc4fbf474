# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SQLite connection management for the risk register database."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from riskscope.core.exceptions import StorageError
from riskscope.storage.migrations import run_migrations

_db: aiosqlite.Connection | None = None


async def init_db(
    db_path: Path | str = "riskscope.db",
    *,
    auto_migrate: bool = True,
) -> aiosqlite.Connection:
    """Initialize the database connection, optionally run migrations, return it.

    Enables WAL mode so the API can read while an import is writing.
    """
    global _db

    if _db is not None:
        return _db

    try:
        _db = await aiosqlite.connect(str(db_path))
        _db.row_factory = aiosqlite.Row

        await _db.execute("PRAGMA journal_mode=WAL")

        if auto_migrate:
            await run_migrations(_db)

        return _db
    except Exception as exc:
        if _db is not None:
            await _db.close()
        _db = None
        msg = f"Failed to initialize database at {db_path}: {exc}"
        raise StorageError(msg) from exc


async def get_db() -> aiosqlite.Connection:
    """Get the active database connection.

    Raises StorageError if the database has not been initialized.
    """
    if _db is None:
        raise StorageError("Database not initialized. Call init_db() first.")
    return _db


async def close_db() -> None:
    """Close the database connection."""
    global _db

    if _db is not None:
        await _db.close()
        _db = None
