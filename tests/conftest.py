# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import pytest

from riskscope.core.config import Settings
from riskscope.core.exceptions import UpstreamUnavailable
from riskscope.embeddings.base import EmbeddingProvider
from riskscope.models.risk import RiskAssessment
from riskscope.scoring.calculator import reset_configured_thresholds
from riskscope.sources.memory import InMemoryRiskStore


class StubEmbedder(EmbeddingProvider):
    """Embedder returning fixed vectors keyed by a substring of the text.

    The first key found in the text wins; unmatched text gets ``default``.
    Every call is recorded in ``calls``. While ``failures`` is positive each
    call raises ``error`` (default :class:`UpstreamUnavailable`).
    """

    def __init__(
        self,
        vectors: dict[str, Sequence[float]] | None = None,
        *,
        dimension: int = 3,
        default: Sequence[float] | None = None,
        delay: float = 0.0,
        failures: int = 0,
        error: Exception | None = None,
    ) -> None:
        self._vectors = {k: list(v) for k, v in (vectors or {}).items()}
        self._dimension = dimension
        self._default = list(default) if default is not None else [0.0] * (dimension - 1) + [1.0]
        self.delay = delay
        self.failures = failures
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_id(self) -> str:
        return "stub"

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures > 0:
            self.failures -= 1
            raise self.error or UpstreamUnavailable("stub embedder down")
        for key, vector in self._vectors.items():
            if key in text:
                return list(vector)
        return list(self._default)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _reset_thresholds():
    """Keep the cached level thresholds from leaking between tests."""
    reset_configured_thresholds()
    yield
    reset_configured_thresholds()


@pytest.fixture
def make_risk() -> Callable[..., RiskAssessment]:
    """Factory for risks; unspecified fields default to a scored LOW risk."""

    def _make(risk_id: str = "R-1", title: str = "Sample risk", **fields: object) -> RiskAssessment:
        data: dict[str, object] = {
            "id": risk_id,
            "title": title,
            "confidentiality": 1,
            "integrity": 1,
            "availability": 1,
            "likelihood": 1,
        }
        data.update(fields)
        return RiskAssessment.model_validate(data)

    return _make


@pytest.fixture
def fast_settings(tmp_path) -> Settings:
    """Settings with short timers, no embedding cache, and a temp database."""
    return Settings(
        progress_interval=0.01,
        completion_hold=0.0,
        embedding_cache=False,
        db_path=tmp_path / "riskscope-test.db",
        api_keys=[],
    )


@pytest.fixture
def register(make_risk) -> InMemoryRiskStore:
    """A small register: two near-duplicates, one unrelated, one archived."""
    return InMemoryRiskStore(
        [
            make_risk(
                "R-1",
                "Unauthorized DB access",
                threat_description="Attacker reads customer tables",
            ),
            make_risk("R-2", "Office plant needs watering"),
            make_risk(
                "R-3",
                "Database accessed without authorization",
                threat_description="Stolen credentials used on the database",
            ),
            make_risk("R-4", "Unauthorized DB access (old)", archived=True),
        ]
    )


@pytest.fixture
def stub_embedder() -> StubEmbedder:
    """Vectors putting the database risks close together and the plant far away."""
    return StubEmbedder(
        {
            "Unauthorized DB access": [0.9, 0.1, 0.0],
            "Database accessed": [1.0, 0.0, 0.0],
            "Office plant": [0.0, 0.0, 1.0],
        }
    )


@pytest.fixture
def embedder_factory() -> type[StubEmbedder]:
    return StubEmbedder
