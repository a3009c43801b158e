"""
Correlation ID middleware
=========================
Injects a unique X-Correlation-ID into every request so that all log lines
for a single HTTP call share the same identifier, including lines written by
services deep in the call stack (the id is kept in a context variable that
the logger's filter reads).
"""
from __future__ import annotations

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from juridico.core.logger import correlation_id_var, logger

HEADER = "X-Correlation-ID"


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Accept from client or generate fresh
        correlation_id = request.headers.get(HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)

        started = time.perf_counter()
        try:
            logger.info(f"request {request.method} {request.url.path}")
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"response {request.method} {request.url.path} "
                f"status={response.status_code} duration_ms={elapsed_ms:.1f}"
            )
        finally:
            correlation_id_var.reset(token)

        response.headers[HEADER] = correlation_id
        return response
