"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.utils.cache import get_redis

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight health check for load balancer (no DB/Redis check)."""
    return {
        "status": "ok",
        "service": "IncorpDesk",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check: database always, Redis only when configured.

    Returns 200 only if every configured dependency answers.
    """
    checks = {"service": "ok", "database": "unknown", "redis": "disabled"}
    overall_healthy = True

    database = getattr(request.app.state, "db", None)
    if database is None:
        checks["database"] = "not configured"
        overall_healthy = False
    else:
        try:
            async with database.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception as e:
            checks["database"] = f"error: {str(e)[:100]}"
            overall_healthy = False

    redis_client = await get_redis()
    if redis_client is not None:
        try:
            await redis_client.ping()
            checks["redis"] = "ok"
        except Exception as e:
            checks["redis"] = f"error: {str(e)[:100]}"
            overall_healthy = False

    return JSONResponse(
        status_code=200 if overall_healthy else 503,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": "IncorpDesk",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
