# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Database management commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer

app = typer.Typer()


@app.command()
def init() -> None:
    """Initialize the SQLite database schema."""
    asyncio.run(_init_db())


async def _init_db() -> None:
    from riskscope.core.config import get_settings
    from riskscope.storage.database import close_db, init_db

    settings = get_settings()
    typer.echo(f"Initializing database at {settings.db_path}...")
    await init_db(settings.db_path)
    await close_db()
    typer.echo("Database initialized.")


@app.command()
def migrate() -> None:
    """Apply pending database migrations."""
    asyncio.run(_migrate_db())


async def _migrate_db() -> None:
    from riskscope.core.config import get_settings
    from riskscope.storage.database import close_db, init_db
    from riskscope.storage.migrations import (
        get_current_version,
        get_pending_migrations,
        run_migrations,
    )

    settings = get_settings()
    db = await init_db(settings.db_path, auto_migrate=False)

    try:
        current = await get_current_version(db)
        pending = await get_pending_migrations(db)

        typer.echo(f"Database: {settings.db_path}")
        typer.echo(f"Current schema version: {current}")

        if not pending:
            typer.echo("No pending migrations.")
            return

        for m in await run_migrations(db):
            typer.echo(f"Applied migration {m.version:03d}: {m.name}")
    finally:
        await close_db()


@app.command(name="import")
def import_risks(
    path: Annotated[Path, typer.Argument(help="JSON file of risks", exists=True, dir_okay=False)],
) -> None:
    """Load risks from a JSON file into the database (upsert by id)."""
    asyncio.run(_import_risks(path))


async def _import_risks(path: Path) -> None:
    from riskscope.core.config import get_settings
    from riskscope.core.exceptions import ValidationError
    from riskscope.sources.memory import load_risks
    from riskscope.storage.database import close_db, init_db
    from riskscope.storage.repositories.risks import RiskRepository

    try:
        risks = load_risks(path)
    except ValidationError as exc:
        typer.echo(f"Invalid risk file: {exc}", err=True)
        raise typer.Exit(1) from exc

    settings = get_settings()
    db = await init_db(settings.db_path)
    try:
        count = await RiskRepository(db).upsert_many(risks)
        typer.echo(f"Imported {count} risks into {settings.db_path}")
    finally:
        await close_db()


@app.command()
def stats() -> None:
    """Show risk counts."""
    asyncio.run(_show_stats())


async def _show_stats() -> None:
    from riskscope.core.config import get_settings
    from riskscope.storage.database import close_db, init_db

    settings = get_settings()
    db = await init_db(settings.db_path)
    try:
        cursor = await db.execute(
            "SELECT COUNT(*), COALESCE(SUM(archived), 0) FROM risks"
        )
        row = await cursor.fetchone()
        total, archived = (row[0], row[1]) if row else (0, 0)
        typer.echo(f"Database: {settings.db_path}")
        typer.echo(f"  risks: {total} rows ({archived} archived)")
    finally:
        await close_db()
