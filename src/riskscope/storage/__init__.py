# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage layer -- SQLite connection, migrations, and the risk store."""

from riskscope.storage.database import close_db, get_db, init_db
from riskscope.storage.migrations import run_migrations
from riskscope.storage.repositories.risks import RiskRepository
from riskscope.storage.risk_store import SqliteRiskStore

__all__ = [
    "RiskRepository",
    "SqliteRiskStore",
    "close_db",
    "get_db",
    "init_db",
    "run_migrations",
]
