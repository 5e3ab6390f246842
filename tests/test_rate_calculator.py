# This project was developed with assistance from AI tools.
"""Tests for the rate calculator: lookups, adjustments, fees, and variant pricing."""

import logging

import pytest
from db.enums import LoanPurpose

from factories import make_loan, make_matrix, make_matrix_document
from pricing_api.schemas.pricing import ProductVariant
from pricing_api.services.calculator import monthly_payment
from pricing_api.services.rate_calculator import (
    NonFiniteResultError,
    ProductNotFoundError,
    TierNotFoundError,
    _ensure_finite,
    calculate_pricing,
    dscr_adjustment,
    find_base_rate,
    interest_only_adjustment,
    loan_size_adjustment,
    origination_fee_adjustment,
    prepay_points,
    product_adjustment,
    product_term_years,
    program_adjustment,
    small_loan_fee,
    ysp_points,
)

_30_FIXED = ProductVariant(base_product="30_Year_Fixed", term_years=30)
_30_FIXED_IO = ProductVariant(base_product="30_Year_Fixed", interest_only=True, term_years=30)

# ---------------------------------------------------------------------------
# Base rate lookup
# ---------------------------------------------------------------------------


class TestFindBaseRate:
    def test_fico_and_ltv_band(self, matrix):
        assert find_base_rate(matrix, 750, 70) == 6.5

    def test_open_ended_fico_tier(self, matrix):
        assert find_base_rate(matrix, 800, 50) == 6.0

    def test_band_boundaries_resolve_to_first_declared(self, matrix):
        """LTV 55 is not '<55' and lands in '55-60'."""
        assert find_base_rate(matrix, 800, 55) == 6.125

    def test_missing_fico_tier_raises(self, matrix):
        with pytest.raises(TierNotFoundError):
            find_base_rate(matrix, 650, 60)

    def test_missing_ltv_band_raises(self, matrix):
        """The 700-739 tier stops at 70% LTV."""
        with pytest.raises(TierNotFoundError):
            find_base_rate(matrix, 720, 72)

    @pytest.mark.parametrize("fico", [700, 745, 790])
    def test_base_rate_non_decreasing_in_ltv(self, matrix, fico):
        ltvs = [10, 40, 54.9, 55, 57.5, 60, 62, 65, 68, 70]
        rates = [find_base_rate(matrix, fico, ltv) for ltv in ltvs]
        assert rates == sorted(rates)


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


class TestProductAdjustments:
    def test_known_product(self, matrix):
        assert product_adjustment(matrix, "15_Year_Fixed") == -0.25

    def test_unknown_product_raises(self, matrix):
        with pytest.raises(ProductNotFoundError):
            product_adjustment(matrix, "10_Year_Fixed")

    def test_interest_only_adds_flat_adjustment(self, matrix):
        assert interest_only_adjustment(matrix, True) == 0.25
        assert interest_only_adjustment(matrix, False) == 0.0


class TestDscrAdjustment:
    def test_strong_dscr_gets_bonus(self, matrix):
        assert dscr_adjustment(matrix, 1.30, 70) == -0.125

    def test_exactly_1_20_gets_nothing(self, matrix):
        assert dscr_adjustment(matrix, 1.20, 70) == 0.0

    def test_neutral_band(self, matrix):
        assert dscr_adjustment(matrix, 1.05, 70) == 0.0

    def test_low_dscr_at_low_ltv(self, matrix):
        assert dscr_adjustment(matrix, 0.9, 65) == 0.5

    def test_low_dscr_above_65_ltv_is_zero_and_logged(self, matrix, caplog):
        with caplog.at_level(logging.INFO, logger="pricing_api.services.rate_calculator"):
            assert dscr_adjustment(matrix, 0.9, 70) == 0.0
        assert "No DSCR bucket" in caplog.text


class TestProgramAdjustment:
    def test_purchase_sfr_has_none(self, matrix):
        assert program_adjustment(matrix, LoanPurpose.PURCHASE, "Single Family") == 0.0

    def test_cash_out_condo_stack(self, matrix):
        assert program_adjustment(matrix, LoanPurpose.CASH_OUT, "Condo") == pytest.approx(0.375)

    @pytest.mark.parametrize("property_type", ["2-4 Units", "Multi Family", "2-4_units"])
    def test_two_to_four_units(self, matrix, property_type):
        assert program_adjustment(matrix, LoanPurpose.PURCHASE, property_type) == 0.125

    def test_refinance_is_not_cash_out(self, matrix):
        assert program_adjustment(matrix, LoanPurpose.REFINANCE, "Single Family") == 0.0


class TestOriginationFeeAdjustment:
    @pytest.mark.parametrize(
        "broker_comp, expected",
        [(0.0, -0.125), (0.5, -0.125), (0.75, 0.0), (1.0, 0.0), (1.5, 0.25), (3.0, 0.25)],
    )
    def test_smallest_bucket_at_or_above_comp(self, matrix, broker_comp, expected):
        assert origination_fee_adjustment(matrix, broker_comp) == expected

    def test_empty_table_contributes_zero(self):
        document = make_matrix_document()
        document["rate_structure"]["origination_fee_adjustments"] = {}
        assert origination_fee_adjustment(make_matrix(document), 1.0) == 0.0


class TestLoanSizeAndPoints:
    def test_small_loan_adjustment(self, matrix):
        assert loan_size_adjustment(matrix, 120000) == 0.5

    def test_large_loan_adjustment(self, matrix):
        assert loan_size_adjustment(matrix, 1_000_000) == 0.125

    def test_ysp_points(self, matrix):
        assert ysp_points(matrix, 0.5) == 0.5
        assert ysp_points(matrix, 0.75) == 0.0

    def test_prepay_points(self, matrix):
        assert prepay_points(matrix, "3/2/1") == 0.25
        assert prepay_points(matrix, "0/0/0") == 1.0

    def test_no_prepay_and_unknown_prepay_are_zero(self, matrix):
        assert prepay_points(matrix, "None") == 0.0
        assert prepay_points(matrix, "7/7/7") == 0.0


class TestSmallLoanFee:
    @pytest.mark.parametrize("amount", [75000, 85000, 99999])
    def test_inside_inclusive_range(self, matrix, amount):
        assert small_loan_fee(matrix, amount) == 1500

    @pytest.mark.parametrize("amount", [74999, 100000])
    def test_outside_range_is_zero(self, matrix, amount):
        assert small_loan_fee(matrix, amount) == 0.0

    def test_no_rule_is_none(self):
        document = make_matrix_document()
        del document["loan_terms"]["small_loan_fee"]
        assert small_loan_fee(make_matrix(document), 85000) is None


class TestProductTermYears:
    def test_term_from_product_name(self, matrix):
        assert product_term_years(matrix, "15_Year_Fixed") == 15
        assert product_term_years(matrix, "40 Year Fixed") == 40

    def test_term_from_matrix_for_arms(self, matrix):
        assert product_term_years(matrix, "5_6_ARM") == 30

    def test_default_term(self):
        document = make_matrix_document()
        document["loan_terms"]["term"] = "Fully amortizing"
        assert product_term_years(make_matrix(document), "5_6_ARM") == 30


def test_ensure_finite_rejects_infinity():
    with pytest.raises(NonFiniteResultError):
        _ensure_finite(final_rate=6.5, monthly_payment=float("inf"))


# ---------------------------------------------------------------------------
# calculate_pricing
# ---------------------------------------------------------------------------


class TestCalculatePricing:
    def test_strong_dscr_purchase(self, matrix, loan):
        """FICO 750 / LTV 70 / DSCR 1.30 purchase: base 6.5 less the DSCR bonus."""
        result = calculate_pricing(matrix, loan, _30_FIXED, "test")
        assert result.base_rate == 6.5
        assert result.breakdown.dscr_adjustment == -0.125
        assert result.final_rate == 6.375
        assert result.product == "30_Year_Fixed"
        assert result.term_years == 30
        assert result.lender_id == "test"
        assert result.lender_name == "Test Lender"

    def test_final_rate_is_sum_of_adjustments(self, matrix):
        loan = make_loan(loan_purpose="cash_out", property_type="Condo", broker_comp=2.0)
        result = calculate_pricing(matrix, loan, _30_FIXED_IO, "test")
        b = result.breakdown
        expected = (
            b.base_rate
            + b.product_adjustment
            + b.interest_only_adjustment
            + b.dscr_adjustment
            + b.program_adjustment
            + b.origination_fee_adjustment
            + b.loan_size_adjustment
        )
        assert result.final_rate == pytest.approx(round(expected, 4))
        assert result.product == "30_Year_Fixed - Interest Only"

    def test_rate_floor(self):
        document = make_matrix_document()
        document["rate_structure"]["minimum_rate"] = 7.0
        result = calculate_pricing(make_matrix(document), make_loan(), _30_FIXED, "test")
        assert result.final_rate == 7.0

    def test_final_rate_never_below_floor(self, matrix):
        for fico in (700, 750, 800):
            for ltv in (30, 50, 65):
                loan = make_loan(fico=fico, ltv=ltv, broker_comp=0.0)
                result = calculate_pricing(matrix, loan, _30_FIXED, "test")
                assert result.final_rate >= matrix.rate_structure.minimum_rate

    def test_points_and_fees(self, matrix):
        loan = make_loan(ysp=0.5, prepay_structure="3/2/1", discount_points=0.25)
        result = calculate_pricing(matrix, loan, _30_FIXED, "test")
        assert result.points == 1.0
        # 1 point on $350,000 plus the underwriting fee.
        assert result.total_fees == 4995.0
        assert result.fee_breakdown.origination_fee == 3500.0
        assert result.fee_breakdown.ysp_fee == 1750.0
        assert result.fee_breakdown.prepay_fee == 875.0
        assert result.fee_breakdown.underwriting_fee == 1495.0
        assert result.fee_breakdown.small_loan_fee == 0.0

    def test_small_loan_fee_in_total(self, matrix):
        loan = make_loan(loan_amount=80000, ltv=40, estimated_home_value=200000)
        result = calculate_pricing(matrix, loan, _30_FIXED, "test")
        assert result.fee_breakdown.small_loan_fee == 1500
        assert result.total_fees == 1495 + 1500

    def test_monthly_payment_amortizing(self, matrix, loan):
        result = calculate_pricing(matrix, loan, _30_FIXED, "test")
        assert result.monthly_payment == round(monthly_payment(350000, 6.375, 30), 2)

    def test_monthly_payment_interest_only(self, matrix, loan):
        result = calculate_pricing(matrix, loan, _30_FIXED_IO, "test")
        assert result.final_rate == 6.625
        assert result.monthly_payment == round(350000 * 6.625 / 100 / 12, 2)

    def test_missing_tier_returns_none(self, matrix):
        assert calculate_pricing(matrix, make_loan(fico=650), _30_FIXED, "test") is None

    def test_unknown_product_returns_none(self, matrix, loan):
        variant = ProductVariant(base_product="10_Year_Fixed", term_years=10)
        assert calculate_pricing(matrix, loan, variant, "test") is None

    def test_idempotent(self, matrix, loan):
        first = calculate_pricing(matrix, loan, _30_FIXED, "test")
        second = calculate_pricing(matrix, loan, _30_FIXED, "test")
        assert first == second
