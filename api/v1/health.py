"""Health and database readiness endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from api.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Liveness check.

    Returns:
        dict: Status and environment information
    """
    return {
        "status": "ok",
        "env": config.settings.ENV,
    }


@router.get("/health/db")
async def db_health_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check: the database answers a trivial query.

    Returns 503 with {"db": "unavailable"} when it does not; the driver
    error is logged, not returned.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except SQLAlchemyError:
        logger.exception("Database readiness check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"db": "unavailable"},
        )
    return {"db": "ok"}
