"""
Liveness and readiness endpoints.
"""

import time

from fastapi import APIRouter, Depends

from geocontacts.config import settings
from geocontacts.db.pool import db_health_check
from geocontacts.dependencies import ServiceContainer, get_services
from geocontacts.infrastructure.observability.logging import log_health_check
from geocontacts.services.redis_client import fast_redis

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "geocontacts"}


@router.get("/readyz")
async def readyz(services: ServiceContainer = Depends(get_services)):
    """
    Readiness of the database pool, the cache backend and internet reachability.

    Connectivity is reported but does not fail readiness: offline clients
    are served from the cached snapshot.
    """
    checks = {}
    overall_ok = True

    # 1) Database pool
    t0 = time.time()
    try:
        db_health = await db_health_check()
        db_ok = bool(db_health.get("healthy", False))
        checks["database"] = {"ok": db_ok, "latency_ms": round((time.time() - t0) * 1000, 1)}
        if not db_ok:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")
    except Exception as e:
        db_ok = False
        checks["database"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}
    log_health_check("database", db_ok, checks["database"].get("latency_ms", 0.0))
    overall_ok = overall_ok and db_ok

    # 2) Cache backend
    t0 = time.time()
    if settings.CACHE_BACKEND == "redis":
        redis_ok = await fast_redis.ping()
        checks["cache"] = {
            "ok": redis_ok,
            "backend": "redis",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = overall_ok and redis_ok
    else:
        checks["cache"] = {"ok": True, "backend": settings.CACHE_BACKEND}

    # 3) Connectivity (informational)
    t0 = time.time()
    online = await services.probe.is_online()
    checks["connectivity"] = {
        "ok": True,
        "online": online,
        "latency_ms": round((time.time() - t0) * 1000, 1),
    }

    return {"overall_ok": overall_ok, "checks": checks}
