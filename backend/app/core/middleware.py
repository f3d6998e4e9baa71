"""Middleware: request ID propagation, structured access logging."""

import hashlib
import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("credmapping.access")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9\-]{8,64}$")

# Probes hit these constantly; they are not worth an access line.
_QUIET_PATHS = frozenset({"/health"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse a well-formed inbound X-Request-ID or mint one; echo it on the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = inbound if _REQUEST_ID_RE.match(inbound) else str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One line per request: request_id, hashed user, endpoint, status, latency."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        if request.url.path in _QUIET_PATHS:
            return response
        elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        request_id = getattr(request.state, "request_id", "-")
        user_id_raw = getattr(request.state, "user_id", None)
        user_id = _hash_user_id(user_id_raw) if user_id_raw else "-"
        client_ip = request.client.host if request.client else "-"

        logger.info(
            "request_id=%s user=%s ip=%s method=%s path=%s status=%d elapsed_ms=%.1f",
            request_id,
            user_id,
            client_ip,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _hash_user_id(uid: str) -> str:
    """Staff identities stay out of access logs; keep a short SHA-256 prefix."""
    return hashlib.sha256(str(uid).encode()).hexdigest()[:12]
