"""
crm_api.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate correlation IDs.
- Bind request metadata into structlog contextvars.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    - Ensures every request carries a correlation id (header name is configurable)
    - Binds request-scoped contextvars for structured logs
    - Echoes the correlation id on the response
    """

    def __init__(self, app: ASGIApp, *, header_name: str = "Correlation-Id") -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(self._header_name, "").strip() or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            path=request.url.path,
            method=request.method,
        )
        try:
            response: Response = await call_next(request)
        finally:
            # Avoid leaking context across requests under async concurrency.
            structlog.contextvars.clear_contextvars()

        response.headers[self._header_name] = correlation_id
        return response


# --- Module Notes -----------------------------------------------------------
# Authorization audit events (see `authorization.evaluator`) rely on this context for
# correlation; they add their own `path` field explicitly as well.
