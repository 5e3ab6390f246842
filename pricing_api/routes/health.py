# This project was developed with assistance from AI tools.
"""Health check routes."""

import logging

from db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..schemas.health import HealthItem

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health_check(session: AsyncSession = Depends(get_db)) -> list[HealthItem]:
    """Report API liveness and database reachability."""
    items = [
        HealthItem(name="API", status="healthy", message="API is running", version=__version__)
    ]
    try:
        await session.execute(text("SELECT 1"))
        items.append(HealthItem(name="Database", status="healthy", message="Database reachable"))
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        items.append(
            HealthItem(name="Database", status="unhealthy", message="Database unreachable")
        )
    return items
