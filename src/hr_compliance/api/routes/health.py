"""Health, readiness and liveness checks for the process and its database.

These endpoints sit outside ``/api`` and are exempt from per-client limits.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hr_compliance.api.dependencies import DbSession
from hr_compliance.api.limits import limiter
from hr_compliance.services.rate_limiter import rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str
    rate_limited_keys: int


class ReadinessResponse(BaseModel):
    status: str
    database: str


async def database_reachable(db: DbSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database check failed")
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession) -> HealthResponse:
    """Overall status; degraded when the database cannot be reached."""
    healthy = await database_reachable(db)
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        database="healthy" if healthy else "unhealthy",
        rate_limited_keys=len(rate_limiter),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(response: Response, db: DbSession) -> ReadinessResponse:
    """Ready to take traffic only while the database answers."""
    if await database_reachable(db):
        return ReadinessResponse(status="ready", database="healthy")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="not_ready", database="unhealthy")


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}


# Health checks never count against per-client budgets
for endpoint in (health_check, readiness_check, liveness_check):
    limiter.exempt(endpoint)
