# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Similarity detection: ranking, progress estimation, scan coordination."""

from riskscope.similarity.coordinator import SimilarityScanCoordinator
from riskscope.similarity.index import IndexedRisk, SimilarityIndex, cosine_similarity, to_score
from riskscope.similarity.progress import ProgressEstimator
from riskscope.similarity.text import combine_risk_text, matched_fields

__all__ = [
    "IndexedRisk",
    "ProgressEstimator",
    "SimilarityIndex",
    "SimilarityScanCoordinator",
    "combine_risk_text",
    "cosine_similarity",
    "matched_fields",
    "to_score",
]
