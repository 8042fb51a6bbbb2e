"""Request ID tracing middleware — adds X-Request-ID to every response."""
from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Read by the logging filter so every line of a request carries its id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_MAX_CLIENT_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request/response.

    A client-supplied X-Request-ID is honoured when it is short enough to be
    a sane log key; otherwise a UUID4 is generated.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        supplied = request.headers.get("x-request-id", "")
        rid = supplied if 0 < len(supplied) <= _MAX_CLIENT_ID_LENGTH else str(uuid.uuid4())
        token = request_id_var.set(rid)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug("%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = rid
        return response
