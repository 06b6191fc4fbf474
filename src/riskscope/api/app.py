# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from riskscope import __version__
from riskscope.api.middleware import RequestMiddleware
from riskscope.api.routes import cache, health, risks, similarity
from riskscope.core.config import Settings, get_settings
from riskscope.core.exceptions import (
    RiskNotFoundError,
    StaleScan,
    StorageError,
    UpstreamUnavailable,
    ValidationError,
)
from riskscope.similarity.coordinator import SimilarityScanCoordinator
from riskscope.sources.base import RiskReader

logger = logging.getLogger("riskscope.api.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Wire the SQLite store and the coordinator unless they were injected."""
    if getattr(app.state, "coordinator", None) is not None:
        yield
        await app.state.coordinator.aclose()
        return

    from riskscope.embeddings.factory import build_embedding_provider
    from riskscope.storage.database import close_db, init_db
    from riskscope.storage.risk_store import SqliteRiskStore

    settings: Settings = app.state.settings
    db = await init_db(settings.db_path, auto_migrate=settings.auto_migrate)
    store = SqliteRiskStore(db)
    embedder = build_embedding_provider(settings)
    app.state.risk_reader = store
    app.state.coordinator = SimilarityScanCoordinator(store, store, embedder, settings=settings)

    yield

    await app.state.coordinator.aclose()
    await embedder.close()
    await close_db()


def _register_exception_handlers(app: FastAPI) -> None:
    async def not_found(_: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    async def invalid(_: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    async def superseded(_: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    async def unavailable(_: Request, exc: Exception) -> JSONResponse:
        logger.warning("Upstream unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    app.add_exception_handler(RiskNotFoundError, not_found)
    app.add_exception_handler(ValidationError, invalid)
    app.add_exception_handler(StaleScan, superseded)
    app.add_exception_handler(UpstreamUnavailable, unavailable)
    app.add_exception_handler(StorageError, unavailable)


def create_app(
    *,
    settings: Settings | None = None,
    coordinator: SimilarityScanCoordinator | None = None,
    risk_reader: RiskReader | None = None,
) -> FastAPI:
    """Build the app. Pass *coordinator* and *risk_reader* to skip the database."""
    settings = settings or get_settings()
    app = FastAPI(
        title="riskscope",
        description="Risk scoring, treatment compliance, and similar-risk detection",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = settings
    app.state.coordinator = coordinator
    app.state.risk_reader = risk_reader

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Scan-Token"],
    )

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(risks.router, prefix="/api/v1", tags=["risks"])
    app.include_router(similarity.router, prefix="/api/v1", tags=["similarity"])
    app.include_router(cache.router, prefix="/api/v1", tags=["cache"])
    app.add_middleware(RequestMiddleware)

    _register_exception_handlers(app)
    return app
