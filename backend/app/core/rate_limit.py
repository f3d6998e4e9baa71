"""In-memory rate limiting middleware (production only).

Limits:
  /auth/*            → 10 requests/minute per IP
  POST /providers    → 30 requests/hour per session

Single-instance deployment; counters are not shared between workers.
"""

import time
from collections import defaultdict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

# (path prefix, max_requests, window_seconds)
_IP_RULES: list[tuple[str, int, int]] = [
    ("/auth/", 10, 60),
]

# (method, path prefix, max_requests, window_seconds)
_SESSION_RULES: list[tuple[str, str, int, int]] = [
    ("POST", "/providers", 30, 3600),
]


class SlidingWindowCounter:
    """Per-key hit timestamps, pruned to the rule's window on every check."""

    def __init__(self) -> None:
        self._hits: dict[str, list[float]] = defaultdict(list)

    def is_allowed(self, key: str, max_requests: int, window: int) -> bool:
        now = time.monotonic()
        cutoff = now - window
        hits = [t for t in self._hits[key] if t > cutoff]
        self._hits[key] = hits
        if len(hits) >= max_requests:
            return False
        hits.append(now)
        return True

    def reset(self) -> None:
        self._hits.clear()


_ip_counter = SlidingWindowCounter()
_session_counter = SlidingWindowCounter()


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        from app.config import settings
        if not settings.is_production:
            return await call_next(request)

        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        for prefix, max_req, window in _IP_RULES:
            if path.startswith(prefix):
                key = f"ip:{client_ip}:{prefix}"
                if not _ip_counter.is_allowed(key, max_req, window):
                    return _rate_limit_response(request, window)

        # Keyed by the raw session credential: the user is not resolved yet.
        token = request.headers.get("X-Session-Token") or request.cookies.get(
            settings.session_cookie_name
        )
        if token:
            for method, prefix, max_req, window in _SESSION_RULES:
                if request.method == method and path.startswith(prefix):
                    key = f"session:{token}:{method}:{prefix}"
                    if not _session_counter.is_allowed(key, max_req, window):
                        return _rate_limit_response(request, window)

        return await call_next(request)


def _rate_limit_response(request: Request, window: int) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=429,
        content={
            "error": True,
            "status_code": 429,
            "detail": "Rate limit exceeded. Please try again later.",
            "request_id": request_id,
        },
        headers={"Retry-After": str(window)},
    )
