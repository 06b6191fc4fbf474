# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""riskscope - Risk scoring, treatment compliance, and similar-risk detection."""

__version__ = "0.1.0"

from riskscope.sdk import (
    check_similarity,
    check_similarity_sync,
    evaluate_compliance,
    find_similar,
    find_similar_sync,
    score,
)

__all__ = [
    "__version__",
    "check_similarity",
    "check_similarity_sync",
    "evaluate_compliance",
    "find_similar",
    "find_similar_sync",
    "score",
]
