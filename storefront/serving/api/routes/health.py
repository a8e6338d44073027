"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Response
from pydantic import BaseModel
from redis.exceptions import RedisError

from storefront.config import get_settings
from storefront.database.connection import check_database_health
from storefront.serving.cache import get_redis

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Catalog store connectivity
    - Redis connectivity (the cache is optional, so it only degrades)
    """
    settings = get_settings()
    checks = {}
    overall_status = "healthy"

    db_health = await check_database_health()
    checks["database"] = db_health
    if db_health.get("status") != "healthy":
        overall_status = "unhealthy"

    redis = get_redis()
    if redis is None:
        checks["redis"] = {"status": "disabled"}
    else:
        try:
            await redis.ping()
            checks["redis"] = {"status": "healthy"}
        except (RedisError, OSError) as e:
            checks["redis"] = {"status": "unhealthy", "error": str(e)}
            if overall_status == "healthy":
                overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """
    Kubernetes readiness probe endpoint.

    Returns 200 if the catalog store answers.
    """
    db_health = await check_database_health()

    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}

    return {"status": "ready"}
