"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import ORJSONResponse

from gulfquotes.config import get_settings
from gulfquotes.core.logging import get_logger
from gulfquotes.core.redis import get_redis


logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe - the process is up and serving requests."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


async def _check_cassandra(request: Request) -> str:
    session = getattr(request.app.state, "cassandra_session", None)
    if session is None:
        return "unavailable"
    try:
        await session.aexecute("SELECT release_version FROM system.local")
    except Exception as e:
        logger.warning("health_cassandra_failed", error=str(e))
        return "error"
    return "ok"


async def _check_redis() -> str:
    client = get_redis()
    if client is None:
        return "unavailable"
    try:
        await client.ping()
    except Exception as e:
        logger.warning("health_redis_failed", error=str(e))
        return "error"
    return "ok"


@router.get("/ready")
async def readiness(request: Request) -> ORJSONResponse:
    """Readiness probe - Cassandra must be reachable; Redis is optional."""
    checks: dict[str, Any] = {
        "cassandra": await _check_cassandra(request),
        "redis": await _check_redis(),
    }
    ready = checks["cassandra"] == "ok"
    return ORJSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "not_ready", "checks": checks},
    )
