# This project was developed with assistance from AI tools.
"""Pricing orchestration.

Validates a loan once against a matrix, prices every product variant the
matrix implies, and returns the survivors sorted by final rate. No I/O:
the caller fetches the matrix from the Matrix Store first.
"""

import logging

from ..schemas.matrix import PricingMatrix
from ..schemas.pricing import LoanInput, PricingResponse, ProductVariant
from .eligibility import validate_loan_eligibility
from .rate_calculator import calculate_pricing, product_term_years

logger = logging.getLogger(__name__)

# Interest-only variants are only offered on these terms (years).
INTEREST_ONLY_TERMS = frozenset({30, 40})

NOT_ELIGIBLE_ERROR = "Loan not eligible"
NO_OPTIONS_ERROR = "No valid loan options found for this scenario"
INTERNAL_ERROR = "Unable to compute pricing"


def enumerate_variants(matrix: PricingMatrix) -> list[ProductVariant]:
    """Every base product, amortizing, plus interest-only on 30/40 year terms."""
    variants = []
    for base_product in matrix.rate_structure.base_products():
        term_years = product_term_years(matrix, base_product)
        variants.append(ProductVariant(base_product=base_product, term_years=term_years))
        if term_years in INTEREST_ONLY_TERMS:
            variants.append(
                ProductVariant(base_product=base_product, interest_only=True, term_years=term_years)
            )
    return variants


def price_loan(matrix: PricingMatrix, loan: LoanInput, lender_id: str) -> PricingResponse:
    """Validate, then price each variant and rank by final rate.

    Returns:
        ``success=False`` with the validation result when the loan is not
        eligible; ``success=False`` with ``NO_OPTIONS_ERROR`` when every
        variant failed to price; ``success=False`` with ``INTERNAL_ERROR``
        when the matrix could not be evaluated at all.
    """
    try:
        validation = validate_loan_eligibility(matrix, loan)
        if not validation.is_valid:
            logger.info(
                "Loan not eligible for %s: %d error(s)", lender_id, len(validation.errors)
            )
            return PricingResponse(success=False, error=NOT_ELIGIBLE_ERROR, validation=validation)

        results = [
            result
            for variant in enumerate_variants(matrix)
            if (result := calculate_pricing(matrix, loan, variant, lender_id)) is not None
        ]
    except Exception:
        logger.exception("Pricing failed for lender %s", lender_id)
        return PricingResponse(success=False, error=INTERNAL_ERROR)

    if not results:
        return PricingResponse(success=False, error=NO_OPTIONS_ERROR, validation=validation)

    # sorted() is stable, so equal rates keep variant order.
    results = sorted(results, key=lambda r: r.final_rate)
    logger.info("Priced %d option(s) for %s", len(results), lender_id)
    return PricingResponse(success=True, data=results, validation=validation)
