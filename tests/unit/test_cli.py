# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unit tests for CLI commands: score, compliance, check, similar, db."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from riskscope.cli.app import app

runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(app, ["--log-level", "ERROR", *args])


@pytest.fixture(autouse=True)
def _fast_cli(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("RISKSCOPE_DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("RISKSCOPE_PROGRESS_INTERVAL", "0.01")
    monkeypatch.setenv("RISKSCOPE_COMPLETION_HOLD", "0")
    monkeypatch.setenv("RISKSCOPE_EMBEDDING_PROVIDER", "hashing")
    monkeypatch.setenv("RISKSCOPE_CACHE_BACKEND", "memory")
    monkeypatch.delenv("RISKSCOPE_API_KEYS", raising=False)


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "risks.json"
    path.write_text(
        json.dumps(
            {
                "risks": [
                    {"id": "R-1", "title": "Unauthorized database access"},
                    {"id": "R-2", "title": "Office plant needs watering"},
                    {"id": "R-3", "title": "Unauthorized database access", "archived": True},
                ]
            }
        )
    )
    return path


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------


class TestScoreCommand:
    def test_json_output(self) -> None:
        result = _invoke("score", "-c", "3", "-i", "3", "-a", "3", "-l", "4", "--json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"risk": 9, "riskScore": 36, "level": "HIGH"}

    def test_with_mitigation(self) -> None:
        result = _invoke(
            "score", "-c", "5", "-i", "5", "-a", "5", "-l", "1", "-m", "1,1,1,1", "--json"
        )
        data = json.loads(result.stdout)
        assert data["level"] == "MEDIUM"
        assert data["mitigatedRiskScore"] == 3
        assert data["mitigatedLevel"] == "LOW"

    def test_table_output(self) -> None:
        result = _invoke("score", "-c", "1", "-i", "1", "-a", "1", "-l", "1")
        assert result.exit_code == 0
        assert "LOW" in result.output

    def test_out_of_range_factor(self) -> None:
        result = _invoke("score", "-c", "6", "-i", "1", "-a", "1", "-l", "1")
        assert result.exit_code == 2

    def test_bad_mitigated_triple(self) -> None:
        result = _invoke("score", "-c", "1", "-i", "1", "-a", "1", "-l", "1", "-m", "1,2")
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# compliance
# ---------------------------------------------------------------------------


class TestComplianceCommand:
    def test_non_conformance_exits_one(self, tmp_path) -> None:
        path = tmp_path / "risk.json"
        path.write_text(
            json.dumps(
                {
                    "id": "R-9",
                    "title": "Ransomware",
                    "confidentiality": 5,
                    "integrity": 5,
                    "availability": 5,
                    "likelihood": 4,
                    "initialTreatment": "MODIFY",
                }
            )
        )
        result = _invoke("compliance", str(path), "--json")
        assert result.exit_code == 1
        report = json.loads(result.stdout)["R-9"]
        assert report["residualTreatmentFinding"]["kind"] == "NON_CONFORMANCE"
        assert report["initialTreatmentFinding"]["kind"] == "NONE"

    def test_conforming_file_exits_zero(self, tmp_path) -> None:
        path = tmp_path / "risks.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "id": "R-1",
                        "confidentiality": 1,
                        "integrity": 1,
                        "availability": 1,
                        "likelihood": 1,
                        "initialTreatment": "RETAIN",
                    }
                ]
            )
        )
        result = _invoke("compliance", str(path))
        assert result.exit_code == 0, result.output

    def test_invalid_file(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text('[{"id": "R-1", "likelihood": 9}]')
        assert _invoke("compliance", str(path)).exit_code == 2


# ---------------------------------------------------------------------------
# check / similar
# ---------------------------------------------------------------------------


class TestSimilarityCommands:
    def test_check_finds_duplicate(self, corpus_file) -> None:
        result = _invoke(
            "check", "Unauthorized database access", "--corpus", str(corpus_file), "--json"
        )
        assert result.exit_code == 0, result.output
        matches = json.loads(result.stdout)["similarRisks"]
        assert [m["risk"]["id"] for m in matches] == ["R-1"]
        assert matches[0]["score"] == pytest.approx(100.0)

    def test_check_short_title(self, corpus_file) -> None:
        result = _invoke("check", "DB", "--corpus", str(corpus_file), "--json")
        assert json.loads(result.stdout) == {"similarRisks": []}

    def test_similar_ranks_corpus(self, corpus_file) -> None:
        result = _invoke("similar", "R-2", "--corpus", str(corpus_file), "--json")
        assert result.exit_code == 0, result.output
        matches = json.loads(result.stdout)["similarRisks"]
        assert [m["risk"]["id"] for m in matches] == ["R-1"]

    def test_similar_unknown_risk(self, corpus_file) -> None:
        result = _invoke("similar", "R-404", "--corpus", str(corpus_file), "--json")
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# db
# ---------------------------------------------------------------------------


class TestDbCommands:
    def test_import_then_stats(self, corpus_file) -> None:
        result = _invoke("db", "import", str(corpus_file))
        assert result.exit_code == 0, result.output
        assert "Imported 3 risks" in result.output

        result = _invoke("db", "stats")
        assert result.exit_code == 0
        assert "3 rows (1 archived)" in result.output

    def test_migrate_reports_up_to_date(self) -> None:
        assert _invoke("db", "init").exit_code == 0
        result = _invoke("db", "migrate")
        assert result.exit_code == 0
        assert "No pending migrations." in result.output

    def test_check_against_database(self, corpus_file) -> None:
        _invoke("db", "import", str(corpus_file))
        result = _invoke("check", "Unauthorized database access", "--json")
        matches = json.loads(result.stdout)["similarRisks"]
        assert [m["risk"]["id"] for m in matches] == ["R-1"]


def test_version() -> None:
    result = _invoke("version")
    assert result.exit_code == 0
    assert result.output.startswith("riskscope v")
