# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, factor bounds, and policy threshold constants."""

from enum import StrEnum


class RiskLevel(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TreatmentCategory(StrEnum):
    RETAIN = "RETAIN"
    MODIFY = "MODIFY"
    SHARE = "SHARE"
    AVOID = "AVOID"


class FindingKind(StrEnum):
    NONE = "NONE"
    RECOMMENDATION = "RECOMMENDATION"
    NON_CONFORMANCE = "NON_CONFORMANCE"


class ScanState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class EmbeddingBackend(StrEnum):
    HASHING = "hashing"
    OLLAMA = "ollama"


FACTOR_MIN = 1
FACTOR_MAX = 5

# Inclusive lower bounds on risk_score (range 3-75)
LEVEL_THRESHOLD_HIGH = 36
LEVEL_THRESHOLD_MEDIUM = 15

SIMILARITY_THRESHOLD = 70.0
MIN_TITLE_LENGTH = 3

PROGRESS_CAP_PERCENTAGE = 95
