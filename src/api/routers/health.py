"""Health check endpoint."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session
from models.category import Category

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    categories: int = 0


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """
    Check the database and that the shared categories were seeded.

    Reports "degraded" when the database is unreachable or holds no categories.
    """
    try:
        count = (await db.execute(select(func.count()).select_from(Category))).scalar_one()
    except Exception:
        logger.exception("health_check_database_failed")
        return HealthResponse(status="degraded", database="unhealthy")

    return HealthResponse(
        status="healthy" if count else "degraded",
        database="healthy",
        categories=count,
    )
