# This project was developed with assistance from AI tools.
"""Rate calculator.

Pure functions that price one product variant against a matrix: tiered
base-rate lookup, the additive adjustment cascade, the rate floor, points,
amortized payment, and the fee breakdown.

A variant that cannot be priced (missing tier, unknown product, non-finite
figure) yields ``None`` from ``calculate_pricing``; the other variants of
the same request are unaffected.
"""

import logging
import math
import re

from db.enums import LoanPurpose

from ..schemas.matrix import PricingMatrix
from ..schemas.pricing import (
    AdjustmentBreakdown,
    FeeBreakdown,
    LoanInput,
    PricingResult,
    ProductVariant,
)
from .calculator import monthly_payment
from .property_types import CONDO, TWO_TO_FOUR_UNITS, canonical_property_type

logger = logging.getLogger(__name__)

DEFAULT_TERM_YEARS = 30
NO_PREPAY = "None"

_DSCR_BONUS_ABOVE = 1.20
_DSCR_PENALTY_BELOW = 1.00
_LOW_DSCR_MAX_LTV = 65

_PRODUCT_TERM_PATTERN = re.compile(r"(\d+)[_\s-]*year", re.IGNORECASE)
_TERM_PATTERN = re.compile(r"(\d+)")


class PricingCalculationError(Exception):
    """A single product variant cannot be priced."""


class TierNotFoundError(PricingCalculationError):
    """No base-rate tier covers the borrower's FICO or LTV."""


class ProductNotFoundError(PricingCalculationError):
    """The product has no adjustment entry in the matrix."""


class NonFiniteResultError(PricingCalculationError):
    """Arithmetic produced NaN or infinity."""


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def find_base_rate(matrix: PricingMatrix, fico: int, ltv: float) -> float:
    """Resolve the base rate from the FICO band, then the LTV band within it."""
    tier = matrix.base_rates.find_tier(fico)
    if tier is None:
        raise TierNotFoundError(f"FICO score {fico} is not in any base-rate tier")
    band = tier.ltv_bands.lookup(ltv)
    if band is None:
        raise TierNotFoundError(f"LTV {ltv}% is not in any band for FICO tier {tier.key.raw}")
    return band.value


def product_adjustment(matrix: PricingMatrix, base_product: str) -> float:
    adjustment = matrix.rate_structure.products.get(base_product)
    if adjustment is None:
        raise ProductNotFoundError(f"Product {base_product!r} has no rate adjustment")
    return adjustment


def interest_only_adjustment(matrix: PricingMatrix, interest_only: bool) -> float:
    if not interest_only:
        return 0.0
    return matrix.rate_structure.interest_only_adjustment


def dscr_adjustment(matrix: PricingMatrix, dscr: float, ltv: float) -> float:
    """Tiered DSCR adjustment.

    DSCR below 1.00 with LTV above 65 has no bucket and prices at zero.
    """
    buckets = matrix.rate_structure.program_adjustments.dscr_adjustments
    if dscr > _DSCR_BONUS_ABOVE:
        return buckets.dscr_gt_1_20
    if dscr < _DSCR_PENALTY_BELOW and ltv <= _LOW_DSCR_MAX_LTV:
        return buckets.dscr_lt_1_00_to_0_75_ltv_le_65
    if dscr < _DSCR_PENALTY_BELOW:
        logger.info("No DSCR bucket for DSCR %.2f at LTV %.1f%%; applying 0", dscr, ltv)
    return 0.0


def program_adjustment(
    matrix: PricingMatrix,
    loan_purpose: LoanPurpose,
    property_type: str,
) -> float:
    """Cash-out, condo, and 2-4 unit program add-ons."""
    programs = matrix.rate_structure.program_adjustments
    adjustment = 0.0
    if loan_purpose == LoanPurpose.CASH_OUT:
        adjustment += programs.cash_out_refinance
    canonical = canonical_property_type(property_type)
    if canonical == CONDO:
        adjustment += programs.condo
    elif canonical == TWO_TO_FOUR_UNITS:
        adjustment += programs.two_to_four_units
    return adjustment


def origination_fee_adjustment(matrix: PricingMatrix, broker_comp: float) -> float:
    """Bucket broker compensation: smallest threshold >= comp, else the largest bucket."""
    buckets = sorted(
        (entry.key.low, entry.value)
        for entry in matrix.rate_structure.origination_fee_adjustments.entries
        if entry.key.low is not None
    )
    if not buckets:
        return 0.0
    for threshold, adjustment in buckets:
        if threshold >= broker_comp:
            return adjustment
    return buckets[-1][1]


def loan_size_adjustment(matrix: PricingMatrix, loan_amount: float) -> float:
    entry = matrix.rate_structure.loan_size_adjustments.lookup(loan_amount)
    return entry.value if entry is not None else 0.0


def ysp_points(matrix: PricingMatrix, ysp: float) -> float:
    entry = matrix.broker_payout_add_ons.lookup(ysp)
    return entry.value if entry is not None else 0.0


def prepay_points(matrix: PricingMatrix, prepay_structure: str) -> float:
    if prepay_structure == NO_PREPAY:
        return 0.0
    return matrix.rate_structure.prepay_penalty_structures.get(prepay_structure, 0.0)


def small_loan_fee(matrix: PricingMatrix, loan_amount: float) -> float | None:
    """Flat fee inside the declared range, 0 outside it, None if the matrix has no such fee."""
    rule = matrix.loan_terms.small_loan_fee
    if rule is None:
        return None
    return rule.amount if rule.applies(loan_amount) else 0.0


def product_term_years(matrix: PricingMatrix, base_product: str) -> int:
    """Term from the product name (``15_Year_Fixed``), else the matrix note term."""
    match = _PRODUCT_TERM_PATTERN.search(base_product)
    if match:
        return int(match.group(1))
    match = _TERM_PATTERN.search(matrix.loan_terms.term)
    return int(match.group(1)) if match else DEFAULT_TERM_YEARS


# ---------------------------------------------------------------------------
# Variant pricing
# ---------------------------------------------------------------------------


def _ensure_finite(**figures: float) -> None:
    for name, value in figures.items():
        if not math.isfinite(value):
            raise NonFiniteResultError(f"{name} is not finite ({value})")


def _price_variant(
    matrix: PricingMatrix,
    loan: LoanInput,
    variant: ProductVariant,
    lender_id: str,
) -> PricingResult:
    breakdown = AdjustmentBreakdown(
        base_rate=find_base_rate(matrix, loan.fico, loan.ltv),
        product_adjustment=product_adjustment(matrix, variant.base_product),
        interest_only_adjustment=interest_only_adjustment(matrix, variant.interest_only),
        dscr_adjustment=dscr_adjustment(matrix, loan.dscr, loan.ltv),
        program_adjustment=program_adjustment(matrix, loan.loan_purpose, loan.property_type),
        origination_fee_adjustment=origination_fee_adjustment(matrix, loan.broker_comp),
        loan_size_adjustment=loan_size_adjustment(matrix, loan.loan_amount),
        ysp_points=ysp_points(matrix, loan.ysp),
        prepay_points=prepay_points(matrix, loan.prepay_structure),
        discount_points=loan.discount_points,
    )

    rate = (
        breakdown.base_rate
        + breakdown.product_adjustment
        + breakdown.interest_only_adjustment
        + breakdown.dscr_adjustment
        + breakdown.program_adjustment
        + breakdown.origination_fee_adjustment
        + breakdown.loan_size_adjustment
    )
    final_rate = max(rate, matrix.rate_structure.minimum_rate)
    points = breakdown.ysp_points + breakdown.prepay_points + breakdown.discount_points

    try:
        payment = monthly_payment(
            loan.loan_amount, final_rate, variant.term_years, variant.interest_only
        )
    except (ZeroDivisionError, OverflowError) as exc:
        raise NonFiniteResultError(f"monthly payment at {final_rate}%: {exc}") from exc

    amount = loan.loan_amount
    underwriting_fee = matrix.loan_terms.underwriting_fee
    slf = small_loan_fee(matrix, amount)
    total_fees = points / 100 * amount + underwriting_fee + (slf or 0.0)

    _ensure_finite(
        final_rate=final_rate, points=points, monthly_payment=payment, total_fees=total_fees
    )

    fee_breakdown = FeeBreakdown(
        origination_fee=round(loan.broker_comp / 100 * amount, 2),
        underwriting_fee=round(underwriting_fee, 2),
        ysp_fee=round(breakdown.ysp_points / 100 * amount, 2),
        prepay_fee=round(breakdown.prepay_points / 100 * amount, 2),
        loan_size_fee=round(breakdown.loan_size_adjustment / 100 * amount, 2),
        small_loan_fee=slf,
    )

    return PricingResult(
        lender_id=lender_id,
        lender_name=matrix.lender,
        product=variant.name,
        base_product=variant.base_product,
        interest_only=variant.interest_only,
        base_rate=breakdown.base_rate,
        final_rate=round(final_rate, 4),
        points=round(points, 4),
        monthly_payment=round(payment, 2),
        total_fees=round(total_fees, 2),
        term_years=variant.term_years,
        breakdown=breakdown,
        fee_breakdown=fee_breakdown,
    )


def calculate_pricing(
    matrix: PricingMatrix,
    loan: LoanInput,
    variant: ProductVariant,
    lender_id: str,
) -> PricingResult | None:
    """Price one variant, or return None when it cannot be priced."""
    try:
        return _price_variant(matrix, loan, variant, lender_id)
    except PricingCalculationError as exc:
        logger.warning("Skipping %s for lender %s: %s", variant.name, lender_id, exc)
        return None
