# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output for scores, compliance findings, and similar risks."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from riskscope.core.constants import FindingKind, RiskLevel
from riskscope.models.compliance import ComplianceFinding, ComplianceReport
from riskscope.models.score import RiskScores, ScoreResult
from riskscope.models.similarity import SimilarityCandidate

console = Console()

LEVEL_COLORS = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}

FINDING_COLORS = {
    FindingKind.NON_CONFORMANCE: "bold red",
    FindingKind.RECOMMENDATION: "yellow",
    FindingKind.NONE: "green",
}


def _score_cell(result: ScoreResult | None) -> str:
    if result is None:
        return "[dim]not scored[/dim]"
    color = LEVEL_COLORS.get(result.level, "white")
    return f"{result.risk} x L = {result.risk_score}  [{color}]{result.level}[/{color}]"


def format_scores(scores: RiskScores, *, title: str = "Risk Score") -> None:
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")
    table.add_row("Initial:", _score_cell(scores.initial))
    table.add_row("Mitigated:", _score_cell(scores.mitigated))
    console.print(table)


def _finding_line(label: str, finding: ComplianceFinding) -> str:
    color = FINDING_COLORS.get(finding.kind, "white")
    line = f"{label}: [{color}]{finding.kind}[/{color}]"
    if finding.reason:
        line += f"\n    {finding.reason}"
    if finding.rule:
        line += f" [dim]({finding.rule})[/dim]"
    return line


def format_compliance(report: ComplianceReport, *, title: str = "Compliance") -> None:
    style = "red" if report.has_non_conformance else "green"
    body = "\n".join(
        [
            _finding_line("Initial treatment", report.initial_treatment_finding),
            _finding_line("Residual treatment", report.residual_treatment_finding),
        ]
    )
    console.print(Panel(body, title=title, style=style))


def format_candidates(candidates: list[SimilarityCandidate], *, title: str) -> None:
    if not candidates:
        console.print("[bold green]No similar risks found.[/bold green]")
        return
    table = Table(title=title)
    table.add_column("Risk", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Fields")
    for c in candidates:
        table.add_row(c.risk_id, c.title, f"{c.score:.1f}", ", ".join(c.matched_fields) or "-")
    console.print(table)
