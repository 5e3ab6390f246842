# This project was developed with assistance from AI tools.
"""Cash-flow and amortization math.

Pure math, no I/O. Shared by the rate calculator, the eligibility
validator, and the public DSCR calculator route.
"""

from ..schemas.calculator import DscrRequest, DscrResponse


def monthly_payment(
    loan_amount: float,
    annual_rate_pct: float,
    term_years: int,
    interest_only: bool = False,
) -> float:
    """Level monthly payment, or the interest-only payment.

    A zero rate degrades to straight-line principal (amortizing) or zero
    interest (interest-only) instead of dividing by zero. So does a rate
    too small to move ``1 + r`` off 1.0 in floating point.
    """
    monthly_rate = annual_rate_pct / 100 / 12
    n_payments = term_years * 12

    if interest_only:
        return loan_amount * monthly_rate

    # P = L * [r(1+r)^n] / [(1+r)^n - 1]
    compound = (1 + monthly_rate) ** n_payments
    if monthly_rate == 0 or compound == 1:
        return loan_amount / n_payments if n_payments > 0 else 0.0

    return loan_amount * monthly_rate * compound / (compound - 1)


def net_operating_income(
    monthly_rental_income: float,
    annual_property_insurance: float,
    annual_property_taxes: float,
    monthly_hoa_fee: float,
) -> float:
    """Annual rent less insurance, taxes, and HOA dues."""
    annual_expenses = annual_property_insurance + annual_property_taxes + monthly_hoa_fee * 12
    return monthly_rental_income * 12 - annual_expenses


def debt_service_coverage(noi: float, monthly_debt_payment: float) -> float | None:
    """NOI over annual debt service; None when there is no debt service."""
    annual_debt_service = monthly_debt_payment * 12
    if annual_debt_service <= 0:
        return None
    return noi / annual_debt_service


def calculate_dscr(req: DscrRequest) -> DscrResponse:
    """Compute DSCR for a rental property at a given rate and term."""
    payment = monthly_payment(
        req.loan_amount, req.interest_rate, req.loan_term_years, req.interest_only
    )
    noi = net_operating_income(
        req.monthly_rental_income,
        req.annual_property_insurance,
        req.annual_property_taxes,
        req.monthly_hoa_fee,
    )
    dscr = debt_service_coverage(noi, payment)
    meets_target = dscr is not None and dscr >= req.target_dscr

    rent_shortfall_warning = None
    if dscr is not None and not meets_target:
        extra_rent = (req.target_dscr * payment * 12 - noi) / 12
        rent_shortfall_warning = (
            f"DSCR of {dscr:.2f} is below the {req.target_dscr:.2f} target. "
            f"Monthly rent would need to rise by about ${extra_rent:,.0f}."
        )

    return DscrResponse(
        monthly_payment=round(payment, 2),
        annual_debt_service=round(payment * 12, 2),
        net_operating_income=round(noi, 2),
        dscr=round(dscr, 4) if dscr is not None else None,
        meets_target=meets_target,
        rent_shortfall_warning=rent_shortfall_warning,
    )
