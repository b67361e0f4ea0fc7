"""ASGI middleware: browser security headers and per-client rate limiting."""

from __future__ import annotations

import logging
import time

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import ASGIApp

from snipbox.api.dependencies import wants_json

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests, please try again later."

_CDNS = "https://cdnjs.cloudflare.com https://cdn.jsdelivr.net"

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        f"script-src 'self' 'unsafe-inline' {_CDNS}",
        f"style-src 'self' 'unsafe-inline' {_CDNS}",
        f"font-src 'self' {_CDNS}",
        "img-src 'self' data: https://cdnjs.cloudflare.com",
        "connect-src 'self'",
        "object-src 'none'",
        "base-uri 'self'",
        "form-action 'self'",
        "frame-ancestors 'none'",
    ]
)

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client moving-window request limit.

    The client is the peer address, or with ``proxy_hops`` > 0 the
    ``X-Forwarded-For`` entry that many hops back from the nearest proxy.
    """

    def __init__(self, app: ASGIApp, limit: int, window_seconds: int, proxy_hops: int = 0) -> None:
        super().__init__(app)
        self.item = RateLimitItemPerSecond(limit, window_seconds)
        self.proxy_hops = proxy_hops
        self.limiter = MovingWindowRateLimiter(MemoryStorage())

    def client_key(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for", "")
        if self.proxy_hops > 0 and forwarded:
            hops = [part.strip() for part in forwarded.split(",") if part.strip()]
            if hops:
                return hops[-min(self.proxy_hops, len(hops))]
        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        key = self.client_key(request)
        if self.limiter.hit(self.item, "snipbox", key):
            return await call_next(request)

        reset_at, _ = self.limiter.get_window_stats(self.item, "snipbox", key)
        retry_after = str(max(1, int(reset_at - time.time()) + 1))
        logger.warning("rate limit exceeded for %s on %s %s", key, request.method, request.url.path)
        if wants_json(request):
            response: Response = JSONResponse({"success": False, "message": TOO_MANY_REQUESTS}, status_code=429)
        else:
            response = PlainTextResponse(TOO_MANY_REQUESTS, status_code=429)
        response.headers["Retry-After"] = retry_after
        return response
