"""Map domain errors to HTTP responses.

Services raise DomainError subclasses (app/core/errors.py) and know
nothing about HTTP.  Each subclass carries its status code; the handler
renders ``{"detail": message}`` the same way HTTPException does.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import DomainError

logger = logging.getLogger(__name__)


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info(
        "%s %s -> %d %s",
        request.method,
        request.url.path,
        exc.status_code,
        type(exc).__name__,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
