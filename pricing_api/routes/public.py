# This project was developed with assistance from AI tools.
"""Public API routes -- no authentication required."""

from fastapi import APIRouter

from ..schemas.calculator import DscrRequest, DscrResponse
from ..services.calculator import calculate_dscr

router = APIRouter()


@router.post("/calculate-dscr", response_model=DscrResponse)
async def calculate_dscr_route(req: DscrRequest) -> DscrResponse:
    """Estimate a rental property's DSCR at a given rate and term.

    Calculation: NOI = annual rent - insurance - taxes - annual HOA, then
    DSCR = NOI / (monthly payment * 12).
    """
    return calculate_dscr(req)
