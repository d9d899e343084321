"""Request context middleware for logging correlation."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chatbridge.logging import reset_request_id, set_request_id

logger = logging.getLogger("chatbridge.access")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to each inbound request and log its outcome."""

    async def dispatch(  # type: ignore[override]
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        token = set_request_id(request_id)
        request.state.request_id = request_id
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            request.state.request_duration_ms = duration_ms
            logger.info(
                "Request handled",
                extra={
                    "event": "request_handled",
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            reset_request_id(token)
        response.headers.setdefault("x-request-id", request_id)
        return response
