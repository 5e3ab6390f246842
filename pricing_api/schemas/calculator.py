# This project was developed with assistance from AI tools.
"""DSCR calculator schemas."""

from pydantic import BaseModel, Field


class DscrRequest(BaseModel):
    """Input for the public DSCR calculator."""

    loan_amount: float = Field(gt=0)
    interest_rate: float = Field(default=7.0, ge=0, le=20)
    loan_term_years: int = Field(default=30, ge=5, le=40)
    interest_only: bool = False
    monthly_rental_income: float = Field(ge=0)
    annual_property_insurance: float = Field(default=0, ge=0)
    annual_property_taxes: float = Field(default=0, ge=0)
    monthly_hoa_fee: float = Field(default=0, ge=0)
    target_dscr: float = Field(default=1.0, gt=0)


class DscrResponse(BaseModel):
    """DSCR calculation results."""

    monthly_payment: float
    annual_debt_service: float
    net_operating_income: float
    dscr: float | None
    meets_target: bool
    rent_shortfall_warning: str | None = None
