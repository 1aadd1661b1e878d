"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from assettags.core.config import settings
from assettags.core.logging import get_logger
from assettags.db import get_db
from assettags.schemas.health import HealthResponse

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Check application health.

    Returns:
        Health status, application version and database reachability.
    """
    database = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("health_database_unreachable", error=str(e))
        database = "disconnected"

    return HealthResponse(
        status="ok",
        version=settings.version,
        database=database,
    )
