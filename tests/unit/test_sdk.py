# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the public SDK functions."""

from __future__ import annotations

import pytest

import riskscope
from riskscope.core.constants import FindingKind, RiskLevel
from riskscope.core.exceptions import RiskNotFoundError


@pytest.fixture
def risks(register):
    return list(register._risks.values())


class TestScoring:
    def test_score(self, make_risk, fast_settings) -> None:
        risk = make_risk(confidentiality=3, integrity=3, availability=3, likelihood=4)
        scores = riskscope.score(risk, settings=fast_settings)
        assert scores.initial.level == RiskLevel.HIGH
        assert scores.mitigated is None

    def test_evaluate_compliance(self, make_risk, fast_settings) -> None:
        risk = make_risk(likelihood=5, confidentiality=5, initial_treatment="MODIFY")
        report = riskscope.evaluate_compliance(risk, settings=fast_settings)
        assert report.residual_treatment_finding.kind == FindingKind.NON_CONFORMANCE


class TestSimilarity:
    async def test_check_similarity(self, risks, stub_embedder, fast_settings) -> None:
        matches = await riskscope.check_similarity(
            "Database accessed",
            risks,
            exclude_id="R-3",
            settings=fast_settings,
            embedder=stub_embedder,
        )
        assert [m.risk_id for m in matches] == ["R-1"]
        assert not stub_embedder.closed

    async def test_find_similar(self, risks, stub_embedder, fast_settings) -> None:
        matches = await riskscope.find_similar(
            "R-1", risks, limit=1, settings=fast_settings, embedder=stub_embedder
        )
        assert [m.risk_id for m in matches] == ["R-3"]

    async def test_find_similar_unknown(self, risks, stub_embedder, fast_settings) -> None:
        with pytest.raises(RiskNotFoundError):
            await riskscope.find_similar(
                "R-404", risks, settings=fast_settings, embedder=stub_embedder
            )

    def test_sync_wrapper_uses_default_embedder(self, make_risk, fast_settings) -> None:
        risks = [make_risk("R-1", "Unauthorized database access")]
        matches = riskscope.check_similarity_sync(
            "Unauthorized database access", risks, settings=fast_settings
        )
        assert [m.risk_id for m in matches] == ["R-1"]

    def test_find_similar_sync(self, make_risk, fast_settings) -> None:
        risks = [make_risk("R-1", "Phishing"), make_risk("R-2", "Flood")]
        assert len(riskscope.find_similar_sync("R-1", risks, settings=fast_settings)) == 1
