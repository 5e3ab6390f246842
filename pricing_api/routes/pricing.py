# This project was developed with assistance from AI tools.
"""Loan pricing REST endpoints."""

from db import get_db
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.pricing import PricingRequest, PricingResponse, ValidationResult
from ..services.eligibility import validate_loan_eligibility
from ..services.pricing import INTERNAL_ERROR, price_loan
from ._matrix import load_matrix

router = APIRouter()


@router.post(
    "/loan-pricing",
    response_model=PricingResponse,
    responses={
        400: {"model": PricingResponse, "description": "Loan not eligible or no options"},
        500: {"model": PricingResponse, "description": "Pricing could not be computed"},
    },
)
async def create_loan_pricing(
    body: PricingRequest,
    session: AsyncSession = Depends(get_db),
):
    """Price a loan scenario against a lender's matrix.

    Returns every priceable product variant sorted by final rate.
    """
    lender_id = body.lender_id or settings.DEFAULT_LENDER_ID
    matrix = await load_matrix(session, lender_id, body.loan_program)

    response = price_loan(matrix, body.input, lender_id)
    if response.success:
        return response

    status_code = (
        status.HTTP_500_INTERNAL_SERVER_ERROR
        if response.error == INTERNAL_ERROR
        else status.HTTP_400_BAD_REQUEST
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


@router.post("/loan-pricing/validate", response_model=ValidationResult)
async def validate_loan(
    body: PricingRequest,
    session: AsyncSession = Depends(get_db),
) -> ValidationResult:
    """Run eligibility checks only, without pricing."""
    lender_id = body.lender_id or settings.DEFAULT_LENDER_ID
    matrix = await load_matrix(session, lender_id, body.loan_program)
    return validate_loan_eligibility(matrix, body.input)
