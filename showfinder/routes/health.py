"""
Liveness and readiness endpoints.

/readyz reports the database pool, Redis and the approval notification
backlog so the deploy platform can hold traffic until both stores answer.
"""

import time

from fastapi import APIRouter

from showfinder.config import settings
from showfinder.db.pool import db_health_check
from showfinder.services.redis_client import fast_redis

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "showfinder"}


@router.get("/readyz")
async def readyz():
    checks = {}
    overall_ok = True

    # 1) Redis
    t0 = time.time()
    try:
        redis_ok = await fast_redis.ping()
        checks["redis"] = {
            "ok": bool(redis_ok),
            "latency_ms": round((time.time() - t0) * 1000, 1),
            "notification_backlog": await fast_redis.queue_length(settings.NOTIFICATION_QUEUE_KEY),
        }
        overall_ok = overall_ok and bool(redis_ok)
    except Exception as e:
        checks["redis"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}
        overall_ok = False

    # 2) Database pool
    t0 = time.time()
    try:
        db_health = await db_health_check()
        is_healthy = db_health.get("healthy", False)

        checks["database"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        if "pool_stats" in db_health:
            checks["database"]["pool_stats"] = db_health["pool_stats"]
        if "warnings" in db_health:
            checks["database"]["warnings"] = db_health["warnings"]
        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")

        overall_ok = overall_ok and is_healthy
    except Exception as e:
        checks["database"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False

    checks["configuration"] = {
        "ok": True,
        "environment": settings.environment,
        "default_timezone": settings.DEFAULT_TIMEZONE,
    }

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}


@router.get("/health/database")
async def database_health():
    """Detailed database pool health information."""
    return await db_health_check()
