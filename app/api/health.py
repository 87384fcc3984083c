"""Observability endpoints.

  /health (liveness): the process answers; reports per-dependency status.
  /ready (readiness): 503 when a configured database is unreachable, so
  the load balancer stops routing here without restarting the container.
  /metrics: Prometheus text exposition, not JSON.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text

from app.db.engine import engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["observability"])


async def _check_database() -> str:
    if engine is None:
        return "not_configured"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Database health check failed", exc_info=True)
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    """Liveness probe.  Always 200; ``status`` says whether it is degraded."""
    database = await _check_database()
    return {
        "status": "degraded" if database == "degraded" else "ok",
        "checks": {"database": database},
    }


@router.get("/ready")
async def ready() -> Response:
    if await _check_database() == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
