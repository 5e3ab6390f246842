# This project was developed with assistance from AI tools.
"""Loan eligibility validation.

Pure functions -- no DB calls. Validation runs in two phases whose findings
are concatenated:

* Phase A checks scalar thresholds that every matrix carries (excluded
  states, minimum property value, maximum LTV, minimum DSCR, refinance
  FICO floor, eligible property types).
* Phase B walks the matrix's business-rule tables, one category at a time.

Every error carries a remediation with the computed delta that would cure
it (extra down payment, extra rent, FICO points).
"""

import logging
import math
from collections.abc import Callable

from db.enums import LoanPurpose, RuleCategory

from ..schemas.matrix import BusinessRule, PricingMatrix, RuleCondition, StateRule
from ..schemas.pricing import (
    EligibilityFinding,
    FindingSeverity,
    LoanInput,
    ValidationResult,
)
from .calculator import net_operating_income
from .property_types import canonical_property_type, is_five_plus_units

logger = logging.getLogger(__name__)

ZERO_PREPAY_STRUCTURES = frozenset({"0/0/0", "None"})


def _usd(amount: float) -> str:
    # Whole dollars, rounded up from the cent.
    return f"${math.ceil(round(amount, 2)):,}"


def _error(
    code: str,
    message: str,
    remediation: str,
    amount: float | None = None,
    rule_id: str | None = None,
) -> EligibilityFinding:
    return EligibilityFinding(
        code=code,
        severity=FindingSeverity.ERROR,
        message=message,
        remediation=remediation,
        remediation_amount=amount,
        rule_id=rule_id,
    )


def _warning(
    code: str,
    message: str,
    remediation: str | None = None,
    rule_id: str | None = None,
) -> EligibilityFinding:
    return EligibilityFinding(
        code=code,
        severity=FindingSeverity.WARNING,
        message=message,
        remediation=remediation,
        rule_id=rule_id,
    )


def extra_down_payment(ltv: float, max_ltv: float, property_value: float) -> float:
    """Dollars of additional down payment needed to bring LTV down to max_ltv."""
    return max(ltv - max_ltv, 0.0) * property_value / 100


def extra_monthly_rent(loan: LoanInput, dscr_min: float) -> float:
    """Additional monthly rent that lifts the borrower's DSCR to dscr_min.

    Annual debt service is backed out of the NOI implied by the input
    cash-flow figures. When that is not possible, the shortfall is scaled
    by the current rent.
    """
    shortfall = max(dscr_min - loan.dscr, 0.0)
    noi = net_operating_income(
        loan.monthly_rental_income,
        loan.annual_property_insurance,
        loan.annual_property_taxes,
        loan.monthly_hoa_fee,
    )
    if loan.dscr > 0 and noi > 0:
        annual_debt_service = noi / loan.dscr
        return shortfall * annual_debt_service / 12
    return shortfall * loan.monthly_rental_income


# ---------------------------------------------------------------------------
# Phase A: scalar thresholds
# ---------------------------------------------------------------------------


def _check_state(matrix: PricingMatrix, loan: LoanInput) -> EligibilityFinding | None:
    excluded = matrix.meta.not_available_in_states
    if loan.property_state not in excluded:
        return None
    return _error(
        "STATE_NOT_ELIGIBLE",
        f'Property state "{loan.property_state}" is not eligible for this loan program.',
        f"Choose a property in a different state. This program is not available in: "
        f"{', '.join(excluded)}.",
    )


def _check_property_value(matrix: PricingMatrix, loan: LoanInput) -> EligibilityFinding | None:
    min_value = matrix.property_requirements.min_value
    if loan.estimated_home_value >= min_value:
        return None
    shortfall = min_value - loan.estimated_home_value
    return _error(
        "PROPERTY_VALUE_TOO_LOW",
        f"Property value {_usd(loan.estimated_home_value)} is below the program minimum.",
        f"Property value must be at least {_usd(shortfall)} higher to meet the "
        f"{_usd(min_value)} minimum.",
        amount=shortfall,
    )


def _check_ltv(matrix: PricingMatrix, loan: LoanInput) -> EligibilityFinding | None:
    max_ltv = matrix.loan_terms.max_ltv
    if loan.ltv <= max_ltv:
        return None
    extra = extra_down_payment(loan.ltv, max_ltv, loan.estimated_home_value)
    return _error(
        "LTV_TOO_HIGH",
        f"Loan-to-Value (LTV) of {loan.ltv:.1f}% exceeds the {max_ltv:g}% maximum.",
        f"Increase the down payment by {_usd(extra)} or reduce the loan amount to reach "
        f"an LTV of {max_ltv:g}%.",
        amount=extra,
    )


def _check_dscr(matrix: PricingMatrix, loan: LoanInput) -> EligibilityFinding | None:
    dscr_min = matrix.property_requirements.dscr_min
    if loan.dscr >= dscr_min:
        return None
    extra_rent = extra_monthly_rent(loan, dscr_min)
    return _error(
        "DSCR_TOO_LOW",
        f"Debt Service Coverage Ratio (DSCR) of {loan.dscr:.2f} is below the "
        f"{dscr_min:.2f} minimum.",
        f"Increase monthly rental income by {_usd(extra_rent)} or reduce the loan amount "
        f"to reach a DSCR of {dscr_min:.2f}.",
        amount=extra_rent,
    )


def _check_refinance_fico(matrix: PricingMatrix, loan: LoanInput) -> EligibilityFinding | None:
    min_fico = matrix.borrower_requirements.credit.refinance_min_fico
    if loan.loan_purpose != LoanPurpose.REFINANCE or min_fico is None or loan.fico >= min_fico:
        return None
    shortfall = min_fico - loan.fico
    return _error(
        "REFINANCE_FICO_TOO_LOW",
        f"FICO score {loan.fico} is too low for refinance loans.",
        f"Improve the credit score by {shortfall} points to meet the {min_fico} "
        f"refinance minimum.",
        amount=float(shortfall),
    )


def _check_property_type(matrix: PricingMatrix, loan: LoanInput) -> EligibilityFinding | None:
    eligible = matrix.property_requirements.property_types
    remediation = f"Choose one of these eligible property types: {', '.join(eligible)}."
    if is_five_plus_units(loan.property_type):
        return _error(
            "PROPERTY_TYPE_NOT_ELIGIBLE",
            "Multi Family (5+ units) is not eligible for this loan program.",
            remediation,
        )
    if canonical_property_type(loan.property_type) in eligible:
        return None
    return _error(
        "PROPERTY_TYPE_NOT_ELIGIBLE",
        f'Property type "{loan.property_type}" is not eligible for this loan program.',
        remediation,
    )


_SCALAR_CHECKS = (
    _check_state,
    _check_property_value,
    _check_ltv,
    _check_dscr,
    _check_refinance_fico,
    _check_property_type,
)


def check_scalar_thresholds(matrix: PricingMatrix, loan: LoanInput) -> list[EligibilityFinding]:
    """Phase A: thresholds independent of the rule tables."""
    return [finding for check in _SCALAR_CHECKS if (finding := check(matrix, loan)) is not None]


# ---------------------------------------------------------------------------
# Phase B: rule tables
# ---------------------------------------------------------------------------


def condition_matches(condition: RuleCondition | None, loan: LoanInput, rule_id: str = "") -> bool:
    """Evaluate a rule condition against the loan. No condition always matches."""
    if condition is None:
        return True
    for key in condition.unrecognized_keys():
        logger.warning("Ignoring unrecognized condition key %r in rule %s", key, rule_id)

    if condition.loan_purpose is not None and condition.loan_purpose != loan.loan_purpose.value:
        return False
    if condition.loan_amount is not None and not condition.loan_amount.contains(loan.loan_amount):
        return False
    if condition.dscr is not None and not condition.dscr.contains(loan.dscr):
        return False
    if condition.fico is not None and not condition.fico.contains(loan.fico):
        return False
    if (
        condition.prepay_structure is not None
        and condition.prepay_structure != loan.prepay_structure
    ):
        return False
    if condition.product is not None and condition.product != loan.product:
        return False
    return True


def _evaluate_state_rule(rule: StateRule, loan: LoanInput) -> list[EligibilityFinding]:
    if loan.property_state not in rule.states:
        return []
    if not condition_matches(rule.condition, loan, rule.rule_id):
        return []

    findings = []
    requirements, restrictions = rule.requirements, rule.restrictions
    if (
        requirements is not None
        and requirements.zero_prepay_required
        and loan.prepay_structure not in ZERO_PREPAY_STRUCTURES
    ):
        findings.append(
            _warning(
                "STATE_ZERO_PREPAY",
                rule.error_message
                or f"Zero prepayment penalty is required in {loan.property_state}.",
                'Change the prepayment penalty to "0/0/0" to comply with state requirements.',
                rule_id=rule.rule_id,
            )
        )
    if (
        restrictions is not None
        and restrictions.prepay_structures is not None
        and loan.prepay_structure not in restrictions.prepay_structures
    ):
        findings.append(
            _error(
                "STATE_PREPAY_RESTRICTED",
                rule.error_message
                or f'Prepay structure "{loan.prepay_structure}" is not allowed in '
                f"{loan.property_state}.",
                f"Choose one of the allowed prepay structures: "
                f"{', '.join(restrictions.prepay_structures)}.",
                rule_id=rule.rule_id,
            )
        )
    return findings


def _evaluate_loan_purpose_rule(rule: BusinessRule, loan: LoanInput) -> list[EligibilityFinding]:
    min_fico = rule.requirements.min_fico if rule.requirements else None
    if min_fico is None or loan.fico >= min_fico:
        return []
    shortfall = min_fico - loan.fico
    return [
        _error(
            "LOAN_PURPOSE_FICO_TOO_LOW",
            rule.error_message or f"FICO score {loan.fico} is too low for this loan purpose.",
            f"Improve the credit score by {shortfall} points to reach {min_fico}.",
            amount=float(shortfall),
            rule_id=rule.rule_id,
        )
    ]


def _evaluate_prepayment_rule(rule: BusinessRule, loan: LoanInput) -> list[EligibilityFinding]:
    requirements = rule.requirements
    if requirements is None:
        return []

    unmet = []
    if requirements.product is not None and loan.product != requirements.product:
        unmet.append(f"select the {requirements.product} product")
    if requirements.min_fico is not None and loan.fico < requirements.min_fico:
        unmet.append(
            f"improve FICO by {requirements.min_fico - loan.fico} points to "
            f"{requirements.min_fico}+"
        )
    if requirements.interest_only is False and loan.interest_only:
        unmet.append("choose an amortizing (non interest-only) option")
    if requirements.min_dscr is not None and loan.dscr < requirements.min_dscr:
        unmet.append(
            f"increase DSCR by {requirements.min_dscr - loan.dscr:.2f} to "
            f"{requirements.min_dscr:.2f}+"
        )
    if not unmet:
        return []

    return [
        _error(
            "PREPAY_REQUIREMENTS_UNMET",
            rule.error_message
            or f'The "{loan.prepay_structure}" prepayment penalty requires higher qualifications.',
            f"Either meet all requirements ({'; '.join(unmet)}) OR choose a different "
            f"prepayment penalty structure.",
            rule_id=rule.rule_id,
        )
    ]


def _evaluate_dscr_ltv_rule(rule: BusinessRule, loan: LoanInput) -> list[EligibilityFinding]:
    max_ltv = rule.requirements.max_ltv if rule.requirements else None
    if max_ltv is None or loan.ltv <= max_ltv:
        return []
    extra = extra_down_payment(loan.ltv, max_ltv, loan.estimated_home_value)
    return [
        _error(
            "DSCR_LTV_LIMIT",
            rule.error_message
            or f"LTV of {loan.ltv:.1f}% exceeds the {max_ltv:g}% limit for this DSCR.",
            f"Increase the down payment by {_usd(extra)} to reach an LTV of {max_ltv:g}%.",
            amount=extra,
            rule_id=rule.rule_id,
        )
    ]


def _evaluate_product_rule(rule: BusinessRule, loan: LoanInput) -> list[EligibilityFinding]:
    restrictions = rule.restrictions
    if restrictions is None or restrictions.interest_only is not False or not loan.interest_only:
        return []
    return [
        _error(
            "INTEREST_ONLY_NOT_ALLOWED",
            rule.error_message or "Interest-only is not available for this scenario.",
            "Choose an amortizing (non interest-only) option.",
            rule_id=rule.rule_id,
        )
    ]


def _evaluate_rate_rule(rule: BusinessRule, loan: LoanInput) -> list[EligibilityFinding]:
    min_rate = rule.requirements.min_rate if rule.requirements else None
    note = f"A minimum rate of {min_rate:.3f}% applies." if min_rate is not None else None
    return [
        _warning(
            "RATE_RULE",
            rule.error_message or "A rate rule applies to this scenario.",
            note,
            rule_id=rule.rule_id,
        )
    ]


_RULE_EVALUATORS: dict[RuleCategory, Callable[..., list[EligibilityFinding]]] = {
    RuleCategory.LOAN_PURPOSE: _evaluate_loan_purpose_rule,
    RuleCategory.PREPAYMENT_PENALTY: _evaluate_prepayment_rule,
    RuleCategory.DSCR_LTV: _evaluate_dscr_ltv_rule,
    RuleCategory.PRODUCT: _evaluate_product_rule,
    RuleCategory.RATE: _evaluate_rate_rule,
}


def evaluate_business_rules(matrix: PricingMatrix, loan: LoanInput) -> list[EligibilityFinding]:
    """Phase B: every rule category, in declaration order."""
    rules = matrix.business_rules
    findings: list[EligibilityFinding] = []

    for rule in rules.state_rules:
        findings.extend(_evaluate_state_rule(rule, loan))

    for category, evaluate in _RULE_EVALUATORS.items():
        for rule in rules.for_category(category):
            if condition_matches(rule.condition, loan, rule.rule_id):
                findings.extend(evaluate(rule, loan))
    return findings


def validate_loan_eligibility(matrix: PricingMatrix, loan: LoanInput) -> ValidationResult:
    """Run both validation phases and build the verdict."""
    findings = check_scalar_thresholds(matrix, loan) + evaluate_business_rules(matrix, loan)
    result = ValidationResult.from_findings(findings)
    logger.info(
        "Eligibility for %s (%s): valid=%s errors=%d warnings=%d",
        matrix.lender,
        loan.property_state,
        result.is_valid,
        len(result.errors),
        len(result.warnings),
    )
    return result
