# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for riskscope."""


class RiskscopeError(Exception):
    """Base exception for all riskscope errors."""


class ConfigurationError(RiskscopeError):
    """Invalid or missing configuration."""


class ValidationError(RiskscopeError, ValueError):
    """Malformed input such as a factor outside 1-5."""


class UpstreamUnavailable(RiskscopeError):
    """Embedding provider or corpus source could not be reached."""


class StaleScan(RiskscopeError):
    """A scan token was superseded or cancelled; its results are discarded."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Scan {token} is no longer current")
        self.token = token


class RiskNotFoundError(RiskscopeError):
    """The requested risk does not exist in the risk reader."""

    def __init__(self, risk_id: str) -> None:
        super().__init__(f"Risk not found: {risk_id}")
        self.risk_id = risk_id


class StorageError(RiskscopeError):
    """Database or storage operation failed."""
