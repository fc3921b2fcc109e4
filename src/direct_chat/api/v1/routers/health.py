from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from direct_chat.api.v1.routers.ws import get_manager
from direct_chat.infrastructure.db import session as db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, object]:
    """Liveness. Also reports how many users hold a socket on this process."""
    return {"status": "ok", "online_users": len(get_manager().online_users())}


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}

    try:
        await db.ping()
        checks["postgres"] = "ok"
    except Exception as exc:  # noqa: BLE001
        logger.warning("Readiness: postgres unavailable: %s", exc)
        checks["postgres"] = str(exc)

    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        checks["redis"] = "not connected"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:  # noqa: BLE001
            logger.warning("Readiness: redis unavailable: %s", exc)
            checks["redis"] = str(exc)

    ready = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "unavailable", "checks": checks},
    )
