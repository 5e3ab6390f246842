# This project was developed with assistance from AI tools.
"""
Domain enums for loan pricing.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class LoanPurpose(str, enum.Enum):
    PURCHASE = "purchase"
    REFINANCE = "refinance"
    CASH_OUT = "cash_out"


class RuleCategory(str, enum.Enum):
    """Business-rule categories, in evaluation order."""

    STATE = "state_rules"
    LOAN_PURPOSE = "loan_purpose_rules"
    PREPAYMENT_PENALTY = "prepayment_penalty_rules"
    DSCR_LTV = "dscr_ltv_rules"
    PRODUCT = "product_rules"
    RATE = "rate_rules"
