"""Health and readiness endpoints.

  /health (liveness): is the process alive? Always 200; the ``status``
    field says whether a dependency is impaired.
  /ready (readiness): can this instance take traffic? 503 while a
    configured database is unreachable, so the load balancer stops
    routing here without restarting the container.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from gradebook.db import engine as db

router = APIRouter(tags=["health"])


async def _database_check() -> str:
    if db.engine is None:
        return "not_configured"
    return "ok" if await db.ping_database() else "degraded"


@router.get("/health")
async def health() -> dict:
    checks = {"database": await _database_check()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    # In-memory mode has nothing to wait for.
    if await _database_check() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
