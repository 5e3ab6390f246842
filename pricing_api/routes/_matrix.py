# This project was developed with assistance from AI tools.
"""Shared matrix loading for route handlers."""

import logging

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.matrix import PricingMatrix
from ..services.matrix_store import get_pricing_matrix

logger = logging.getLogger(__name__)


async def load_matrix(session: AsyncSession, lender_id: str, loan_program: str) -> PricingMatrix:
    """Fetch the matrix for a route.

    ``MatrixNotFoundError`` propagates to its 404 handler in ``main``; an
    invalid stored document becomes a 500.
    """
    try:
        return await get_pricing_matrix(session, lender_id, loan_program)
    except ValidationError as exc:
        logger.error("Stored matrix for %s/%s is invalid: %s", lender_id, loan_program, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stored pricing matrix is invalid",
        ) from exc
