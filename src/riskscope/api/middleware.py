# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Request logging and X-Request-ID middleware."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("riskscope.api.middleware")


class RequestMiddleware(BaseHTTPMiddleware):
    """Adds request logging and an X-Request-ID header to every response.

    An incoming ``X-Request-ID`` is echoed back so callers can correlate
    their own logs.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        start = time.monotonic()

        response = await call_next(request)

        duration_ms = round((time.monotonic() - start) * 1000, 1)
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )

        return response
