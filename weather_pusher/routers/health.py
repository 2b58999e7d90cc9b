from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from weather_pusher.core.config import settings
from weather_pusher.core.db import get_db

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Service health check",
    description=(
        "Static liveness check. "
        "This endpoint **does not** verify the weather source or database connectivity."
    ),
    response_description="Service status",
)
def health():
    """
    Basic health check for the service.

    **Returns:**
    - `status`: Always `ok` if the service is running
    - `service`: Service name (configured via `APP_NAME`)
    - `environment`: Current environment (configured via `ENVIRONMENT`)
    """
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.environment,
    }


@router.get(
    "/health/db",
    summary="Database health check",
    description=(
        "Checks whether the service can reach the database by executing `SELECT 1`. "
        "If this endpoint fails, the database is down or `DATABASE_URL` is incorrect."
    ),
    response_description="Database connection status",
)
async def health_db(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "ok", "db": "ok"}
