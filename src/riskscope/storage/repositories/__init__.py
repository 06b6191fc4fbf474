# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Data access repositories."""

from riskscope.storage.repositories.risks import RiskRepository

__all__ = ["RiskRepository"]
