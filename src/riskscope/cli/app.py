# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

import typer

from riskscope.cli.commands import cache as cache_cmd
from riskscope.cli.commands import db
from riskscope.core.config import Settings, get_settings
from riskscope.core.exceptions import RiskscopeError, ValidationError
from riskscope.models.similarity import SimilarityCandidate
from riskscope.similarity.coordinator import SimilarityScanCoordinator

app = typer.Typer(
    name="riskscope",
    help="Risk scoring, treatment compliance, and similar-risk detection",
    no_args_is_help=True,
)

app.add_typer(db.app, name="db", help="Database management")
app.add_typer(cache_cmd.app, name="cache", help="Manage the embedding cache")

_CorpusOption = Annotated[
    Path | None,
    typer.Option(
        "--corpus",
        help="JSON file of risks to compare against (default: the database)",
        exists=True,
        dir_okay=False,
    ),
]
_JsonOption = Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")]


@app.callback()
def main(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Override RISKSCOPE_LOG_LEVEL")
    ] = None,
) -> None:
    from riskscope.core.logging import setup_logging

    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


def _write_json(data: object) -> None:
    sys.stdout.write(json.dumps(data, indent=2) + "\n")


@asynccontextmanager
async def _open_coordinator(
    corpus: Path | None, settings: Settings
) -> AsyncIterator[SimilarityScanCoordinator]:
    """Coordinator over a JSON corpus file, or over the configured database."""
    from riskscope.embeddings.factory import build_embedding_provider

    embedder = build_embedding_provider(settings)
    try:
        if corpus is not None:
            from riskscope.sources.memory import InMemoryRiskStore, load_risks

            store = InMemoryRiskStore(load_risks(corpus))
            yield SimilarityScanCoordinator(store, store, embedder, settings=settings)
        else:
            from riskscope.storage.database import close_db, init_db
            from riskscope.storage.risk_store import SqliteRiskStore

            conn = await init_db(settings.db_path, auto_migrate=settings.auto_migrate)
            try:
                sql_store = SqliteRiskStore(conn)
                yield SimilarityScanCoordinator(sql_store, sql_store, embedder, settings=settings)
            finally:
                await close_db()
    finally:
        await embedder.close()


@app.command()
def score(
    confidentiality: Annotated[int, typer.Option("--confidentiality", "-c")],
    integrity: Annotated[int, typer.Option("--integrity", "-i")],
    availability: Annotated[int, typer.Option("--availability", "-a")],
    likelihood: Annotated[int, typer.Option("--likelihood", "-l")],
    mitigated: Annotated[
        str | None,
        typer.Option("--mitigated", "-m", help="Mitigated factors as C,I,A,L"),
    ] = None,
    as_json: _JsonOption = False,
) -> None:
    """Score a set of CIA and likelihood factors (each 1-5)."""
    from riskscope.cli.formatters.console import format_scores
    from riskscope.models.score import RiskScores
    from riskscope.scoring.calculator import (
        LevelThresholds,
        compute_mitigated_score,
        compute_score,
    )

    thresholds = LevelThresholds.from_settings(get_settings())
    try:
        initial = compute_score(
            confidentiality, integrity, availability, likelihood, thresholds=thresholds
        )
        mitigated_result = None
        if mitigated:
            parts = [int(p) for p in mitigated.split(",") if p.strip()]
            if len(parts) != 4:
                raise ValidationError("--mitigated expects four comma-separated factors")
            mitigated_result = compute_mitigated_score(*parts, thresholds=thresholds)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc

    scores = RiskScores(initial=initial, mitigated=mitigated_result)
    if as_json:
        _write_json(scores.to_wire())
    else:
        format_scores(scores)


@app.command()
def compliance(
    path: Annotated[Path, typer.Argument(help="JSON file with one risk or a list", exists=True)],
    as_json: _JsonOption = False,
) -> None:
    """Evaluate treatment-policy compliance for risks in a JSON file.

    Exits 1 when any risk has a NON_CONFORMANCE finding.
    """
    from riskscope.cli.formatters.console import format_compliance
    from riskscope.scoring.calculator import LevelThresholds
    from riskscope.scoring.compliance import ComplianceEvaluator
    from riskscope.sources.memory import load_risks

    try:
        risks = load_risks(path)
    except ValidationError as exc:
        typer.echo(f"Invalid risk file: {exc}", err=True)
        raise typer.Exit(2) from exc

    evaluator = ComplianceEvaluator(LevelThresholds.from_settings(get_settings()))
    reports = [(risk, evaluator.evaluate(risk)) for risk in risks]

    if as_json:
        _write_json({risk.id: report.to_wire() for risk, report in reports})
    else:
        for risk, report in reports:
            format_compliance(report, title=f"{risk.id}: {risk.title}")

    if any(report.has_non_conformance for _, report in reports):
        raise typer.Exit(1)


@app.command()
def check(
    title: Annotated[str, typer.Argument(help="Title of the risk being drafted")],
    threat: Annotated[str | None, typer.Option("--threat", help="Threat description")] = None,
    description: Annotated[str | None, typer.Option("--description", "-d")] = None,
    exclude_id: Annotated[
        str | None, typer.Option("--exclude-id", help="Id of the risk being edited")
    ] = None,
    limit: Annotated[int | None, typer.Option("--limit", "-n", min=1)] = None,
    corpus: _CorpusOption = None,
    as_json: _JsonOption = False,
) -> None:
    """Pre-save duplicate check: list existing risks scoring at least the threshold."""
    settings = get_settings()
    candidates = asyncio.run(
        _async_check(
            title,
            threat,
            description,
            exclude_id,
            limit if limit is not None else settings.precheck_limit,
            corpus,
            settings,
        )
    )
    if as_json:
        _write_json({"similarRisks": [c.to_wire() for c in candidates]})
    else:
        from riskscope.cli.formatters.console import format_candidates

        format_candidates(candidates, title="Possible duplicates")


async def _async_check(
    title: str,
    threat: str | None,
    description: str | None,
    exclude_id: str | None,
    limit: int,
    corpus: Path | None,
    settings: Settings,
) -> list[SimilarityCandidate]:
    async with _open_coordinator(corpus, settings) as coordinator:
        return await coordinator.check_similarity(
            title, threat, description, exclude_id=exclude_id, limit=limit
        )


@app.command()
def similar(
    risk_id: Annotated[str, typer.Argument(help="Id of the risk to compare")],
    limit: Annotated[int | None, typer.Option("--limit", "-n", min=1)] = None,
    corpus: _CorpusOption = None,
    as_json: _JsonOption = False,
) -> None:
    """Rank the register by similarity to one risk, with a progress bar."""
    try:
        asyncio.run(_async_similar(risk_id, limit, corpus, as_json, get_settings()))
    except RiskscopeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


async def _async_similar(
    risk_id: str,
    limit: int | None,
    corpus: Path | None,
    as_json: bool,
    settings: Settings,
) -> None:
    from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

    from riskscope.cli.formatters.console import console, format_candidates
    from riskscope.models.similarity import ScanCompleted, ScanFailed

    candidates: list[SimilarityCandidate] = []
    async with _open_coordinator(corpus, settings) as coordinator:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
            disable=as_json,
        ) as progress:
            task = progress.add_task(f"Scanning for risks like {risk_id}...", total=100)
            async for update in coordinator.scan_for_risk(risk_id, limit):
                progress.update(task, completed=update.progress.percentage)
                if isinstance(update, ScanFailed):
                    raise RiskscopeError(update.error)
                if isinstance(update, ScanCompleted):
                    candidates = update.candidates

    if as_json:
        _write_json({"similarRisks": [c.to_wire() for c in candidates]})
    else:
        format_candidates(candidates, title=f"Risks similar to {risk_id}")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
    workers: Annotated[int, typer.Option("--workers", "-w", help="Worker count")] = 1,
) -> None:
    """Start the riskscope API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "riskscope.api.app:create_app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        workers=workers,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from riskscope import __version__

    typer.echo(f"riskscope v{__version__}")
