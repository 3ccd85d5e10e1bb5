# This project was developed with assistance from AI tools.
"""Health check route."""

import logging

from db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def health(session: AsyncSession = Depends(get_db)) -> dict[str, str]:
    """Report service and database reachability."""
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        database = "unavailable"
    return {"status": "ok", "service": settings.APP_NAME, "database": database}
