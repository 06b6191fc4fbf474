# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Read adapters supplying risks and the similarity corpus."""

from riskscope.sources.base import CorpusSource, RiskReader
from riskscope.sources.memory import InMemoryRiskStore, load_risks

__all__ = ["CorpusSource", "InMemoryRiskStore", "RiskReader", "load_risks"]
