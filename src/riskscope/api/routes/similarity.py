# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""On-demand similarity scan endpoints.

Three ways to run a scan: ``/similar`` blocks until the ranked list is
ready, ``/similar/scans`` starts a background scan to poll by token, and
``/similar/stream`` pushes every update as NDJSON. Polled and streamed
scans sent with an ``X-Client-ID`` header replace that client's earlier
scan of the same risk; blocking scans never replace anything.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from riskscope.api.auth import require_api_key
from riskscope.api.routes.risks import get_coordinator, load_risk
from riskscope.models.risk import RiskAssessment
from riskscope.similarity.coordinator import SimilarityScanCoordinator

logger = logging.getLogger("riskscope.api.similarity")

router = APIRouter(dependencies=[Depends(require_api_key)])

_Limit = Query(default=None, ge=1, le=100)
# A client sending the same id again for a risk supersedes its earlier scan.
_ClientId = Header(default=None, alias="X-Client-ID")


class ScanStartedResponse(BaseModel):
    token: str


@router.post("/risks/{risk_id}/similar")
async def find_similar(
    risk_id: str,
    limit: int | None = _Limit,
    coordinator: SimilarityScanCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    candidates = await coordinator.find_similar(risk_id, limit)
    return {"similarRisks": [c.to_wire() for c in candidates]}


@router.post(
    "/risks/{risk_id}/similar/scans",
    response_model=ScanStartedResponse,
    status_code=202,
)
async def start_scan(
    risk: RiskAssessment = Depends(load_risk),
    limit: int | None = _Limit,
    client_id: str | None = _ClientId,
    coordinator: SimilarityScanCoordinator = Depends(get_coordinator),
) -> ScanStartedResponse:
    """Start a background scan; poll ``/similar/scans/{token}`` for progress."""
    return ScanStartedResponse(token=coordinator.launch(risk.id, limit, caller=client_id))


@router.get("/similar/scans/{token}")
async def scan_status(
    token: str,
    coordinator: SimilarityScanCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    progress = coordinator.progress(token)
    if progress is None:
        raise HTTPException(status_code=404, detail=f"Unknown scan token: {token}")

    body: dict[str, Any] = {
        "state": str(coordinator.state(token)),
        "progress": progress.model_dump(),
    }
    candidates = coordinator.result(token)
    if candidates is not None:
        body["similarRisks"] = [c.to_wire() for c in candidates]
    error = coordinator.error(token)
    if error is not None:
        body["error"] = error
    return body


@router.delete("/similar/scans/{token}", status_code=204)
async def cancel_scan(
    token: str,
    coordinator: SimilarityScanCoordinator = Depends(get_coordinator),
) -> Response:
    if not coordinator.cancel(token):
        raise HTTPException(status_code=404, detail=f"Unknown scan token: {token}")
    return Response(status_code=204)


@router.post("/risks/{risk_id}/similar/stream")
async def stream_scan(
    risk: RiskAssessment = Depends(load_risk),
    limit: int | None = _Limit,
    client_id: str | None = _ClientId,
    coordinator: SimilarityScanCoordinator = Depends(get_coordinator),
) -> StreamingResponse:
    """Stream scan updates as NDJSON; the terminal update is the last line."""
    token = coordinator.start_scan(risk.id, caller=client_id)

    async def lines() -> AsyncIterator[str]:
        try:
            async for update in coordinator.scan_for_risk(risk.id, limit, token=token):
                yield json.dumps(update.to_wire()) + "\n"
        finally:
            coordinator.cancel(token)

    return StreamingResponse(
        lines(),
        media_type="application/x-ndjson",
        headers={"X-Scan-Token": token},
    )
