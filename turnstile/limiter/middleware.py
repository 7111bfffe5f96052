"""Starlette middleware applying the admission gate to a whole app.

Usage:
    app.add_middleware(RateLimitMiddleware, config=RateLimitConfig(...))
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from turnstile.limiter.gate import AdmissionGate, RateLimitConfig


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Runs the downstream app as the gate's wrapped handler."""

    def __init__(self, app: ASGIApp, config: RateLimitConfig) -> None:
        super().__init__(app)
        self.gate = AdmissionGate(config)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        return await self.gate(request, call_next)
