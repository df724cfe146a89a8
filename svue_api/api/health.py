from __future__ import annotations

from fastapi import APIRouter

from svue_api.core.config import settings

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/liveness")
async def liveness():
    # process is up (for the load balancer)
    return {"status": "ok"}


@router.get("/readiness")
async def readiness():
    # can we actually serve a request: need a token key and a version key source
    checks = {
        "enkey": "ok" if settings.enkey else "missing",
        "version": "ok" if (settings.version_number or settings.access_key_url) else "missing",
    }
    ready = all(v == "ok" for v in checks.values())
    return {"status": "ok" if ready else "degraded", **checks}
