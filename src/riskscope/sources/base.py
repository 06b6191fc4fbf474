# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract read interfaces over the risk register.

The similarity coordinator only ever reads; writes belong to the host
application that owns the register.
"""

from __future__ import annotations

import abc

from riskscope.models.risk import CorpusEntry, RiskAssessment


class CorpusSource(abc.ABC):
    """Supplies the comparison corpus: all non-archived risks."""

    @abc.abstractmethod
    async def fetch_corpus(self, exclude_id: str | None = None) -> list[CorpusEntry]:
        """Return every non-archived risk, minus *exclude_id* when given."""

    @abc.abstractmethod
    async def count(self, exclude_id: str | None = None) -> int:
        """Return the size :meth:`fetch_corpus` would have for the same argument."""


class RiskReader(abc.ABC):
    """Looks up a single risk by id."""

    @abc.abstractmethod
    async def get_risk_by_id(self, risk_id: str) -> RiskAssessment | None:
        """Return the risk, or ``None`` if it does not exist."""
