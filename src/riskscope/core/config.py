# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RISKSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Scoring policy (inclusive lower bounds on risk_score)
    level_high_threshold: int = 36
    level_medium_threshold: int = 15

    @model_validator(mode="after")
    def _check_level_thresholds(self) -> "Settings":
        if not 3 < self.level_medium_threshold < self.level_high_threshold <= 75:
            raise ValueError(
                "level thresholds must satisfy 3 < medium < high <= 75, got "
                f"medium={self.level_medium_threshold} high={self.level_high_threshold}"
            )
        return self

    # Similarity
    similarity_threshold: float = 70.0
    min_title_length: int = 3
    scan_default_limit: int = 10
    scan_result_ttl: float = 300.0  # seconds a finished background scan stays pollable
    precheck_limit: int = 5
    upstream_retries: int = 1

    # Similarity index
    index_shard_size: int = 2000
    index_max_workers: int = 4

    # Scan progress reporting
    progress_interval: float = 0.2  # seconds between progress ticks
    progress_item_cost: float = 0.1  # estimated seconds per corpus item
    progress_cap: int = 95
    completion_hold: float = 0.3

    # Embeddings
    embedding_provider: str = "hashing"  # "hashing" or "ollama"
    embedding_model: str = "nomic-embed-text"
    embedding_base_url: str = "http://localhost:11434"
    embedding_timeout: float = 30.0
    embedding_dimension: int = 768
    embedding_concurrency: int = 8
    embedding_cache: bool = True

    # Embedding cache
    cache_backend: str = "memory"  # "memory" or "redis"
    cache_ttl: int = 86400
    cache_max_size: int = 10_000
    redis_url: str = "redis://localhost:6379/0"

    # Database (read adapter for the risk corpus)
    db_path: Path = Path("riskscope.db")
    auto_migrate: bool = True

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_keys: list[str] = []
    cors_origins: list[str] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v if isinstance(v, list) else []

    @field_validator("api_keys", mode="before")
    @classmethod
    def _parse_api_keys(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [k.strip() for k in v.split(",") if k.strip()]
        return v if isinstance(v, list) else []

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    return Settings()
