# This project was developed with assistance from AI tools.
"""Pricing matrix REST endpoints (read-only)."""

from db import get_db
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import Pagination
from ..schemas.matrix import MatrixListResponse, MatrixSummary, PricingMatrix
from ..services.matrix_store import list_pricing_matrices
from ._matrix import load_matrix

router = APIRouter()


@router.get("/matrices", response_model=MatrixListResponse)
async def list_matrices(
    session: AsyncSession = Depends(get_db),
    lender_id: str | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> MatrixListResponse:
    """List stored matrices, optionally for one lender."""
    records, total = await list_pricing_matrices(
        session, lender_id=lender_id, offset=offset, limit=limit
    )
    return MatrixListResponse(
        data=[
            MatrixSummary(
                id=r.id,
                lender_id=r.lender_id,
                loan_program=r.loan_program,
                effective_date=r.effective_date,
                is_active=r.is_active,
            )
            for r in records
        ],
        pagination=Pagination.window(total, offset, limit),
    )


@router.get("/matrices/{lender_id}/{loan_program}", response_model=PricingMatrix)
async def get_matrix(
    lender_id: str,
    loan_program: str,
    session: AsyncSession = Depends(get_db),
) -> PricingMatrix:
    """Return the active matrix for a lender and loan program."""
    return await load_matrix(session, lender_id, loan_program)
