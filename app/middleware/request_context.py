"""Request context middleware: a request ID and one summary line per request.

The ID is taken from X-Request-ID when the client sends one, otherwise
generated.  It goes into ``request_id_var`` (app/core/logging.py) so
every log line of the request carries it, and back out on the response.

Summary lines are INFO for 2xx-4xx and WARNING for 5xx.  An exception
that escapes every handler is logged with its traceback and re-raised
for Starlette's 500 response.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import request_id_var

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 1)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        fields = {
            "request_id": req_id,
            "method": request.method,
            "path": request.url.path,
        }

        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s raised after %.1fms",
                request.method,
                request.url.path,
                _elapsed_ms(start),
                extra={**fields, "status_code": 500},
            )
            raise

        duration_ms = _elapsed_ms(start)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                **fields,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
