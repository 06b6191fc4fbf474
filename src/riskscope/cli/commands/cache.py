# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Embedding cache CLI commands.

Only meaningful with a shared backend (``RISKSCOPE_CACHE_BACKEND=redis``);
the in-memory cache lives and dies with one process.
"""

from __future__ import annotations

import asyncio

import typer

app = typer.Typer()


@app.command()
def clear() -> None:
    """Flush cached embeddings."""
    asyncio.run(_async_clear())


async def _async_clear() -> None:
    from riskscope.cache.manager import build_embedding_cache
    from riskscope.core.config import get_settings

    cache = build_embedding_cache(get_settings())
    try:
        count = await cache.clear()
    finally:
        await cache.close()
    typer.echo(f"Cache cleared: {count} entries removed.")


@app.command()
def stats() -> None:
    """Show the backend and number of cached embeddings."""
    asyncio.run(_async_stats())


async def _async_stats() -> None:
    from rich.console import Console
    from rich.table import Table

    from riskscope.cache.manager import build_embedding_cache
    from riskscope.core.config import get_settings

    settings = get_settings()
    cache = build_embedding_cache(settings)
    try:
        current_size = await cache.size()
    finally:
        await cache.close()

    console = Console()
    table = Table(title="Embedding Cache")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Backend", settings.cache_backend)
    table.add_row("TTL (s)", str(settings.cache_ttl))
    table.add_row("Entries", str(current_size))
    console.print(table)
