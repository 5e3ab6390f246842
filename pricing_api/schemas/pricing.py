# This project was developed with assistance from AI tools.
"""Loan pricing request, validation, and result schemas."""

import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from db.enums import LoanPurpose

INTEREST_ONLY_SUFFIX = " - Interest Only"


class LoanInput(BaseModel):
    """Borrower, property, and loan facts for a single pricing request."""

    model_config = ConfigDict(frozen=True)

    fico: int = Field(ge=300, le=850)
    ltv: float = Field(ge=0, le=100, description="Loan-to-value, in percent.")
    loan_amount: float = Field(gt=0)
    loan_purpose: LoanPurpose
    property_type: str = Field(min_length=1)
    property_state: str = Field(min_length=2)
    occupancy_type: str = "investment"
    product: str = ""
    interest_only: bool = False
    prepay_structure: str = "None"
    dscr: float = Field(ge=0)
    broker_comp: float = Field(default=0.0, ge=0, description="Broker compensation, percent.")
    ysp: float = Field(default=0.0, ge=0, description="Yield spread premium, percent.")
    discount_points: float = 0.0
    estimated_home_value: float = Field(ge=0)
    monthly_rental_income: float = Field(default=0.0, ge=0)
    annual_property_insurance: float = Field(default=0.0, ge=0)
    annual_property_taxes: float = Field(default=0.0, ge=0)
    monthly_hoa_fee: float = Field(default=0.0, ge=0)
    is_short_term_rental: bool = False
    units: int = Field(default=1, ge=1)

    @field_validator("property_state")
    @classmethod
    def _normalize_state(cls, value: str) -> str:
        return value.strip().upper()


class PricingRequest(BaseModel):
    """Body of POST /api/loan-pricing."""

    loan_program: str = Field(min_length=1)
    lender_id: str | None = Field(
        default=None,
        description="Lender whose matrix to price against. Defaults to the configured lender.",
    )
    input: LoanInput


class ProductVariant(BaseModel):
    """A priceable product: a base product, optionally layered interest-only."""

    model_config = ConfigDict(frozen=True)

    base_product: str
    interest_only: bool = False
    term_years: int

    @property
    def name(self) -> str:
        if self.interest_only:
            return f"{self.base_product}{INTEREST_ONLY_SUFFIX}"
        return self.base_product


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class FindingSeverity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"


class EligibilityFinding(BaseModel):
    """One eligibility problem, with its suggested fix kept separate."""

    model_config = ConfigDict(frozen=True)

    code: str
    severity: FindingSeverity
    message: str
    remediation: str | None = None
    remediation_amount: float | None = Field(
        default=None,
        description="Computed delta behind the remediation (dollars, points, or ratio).",
    )
    rule_id: str | None = None

    def display(self) -> str:
        if self.remediation:
            return f"{self.message}\nSolution: {self.remediation}"
        return self.message


class ValidationResult(BaseModel):
    """Eligibility verdict. Errors block pricing; warnings are advisory."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    findings: list[EligibilityFinding] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validity_matches_errors(self) -> "ValidationResult":
        if self.is_valid != (len(self.errors) == 0):
            raise ValueError("is_valid must be True exactly when there are no errors")
        return self

    @classmethod
    def from_findings(cls, findings: list[EligibilityFinding]) -> "ValidationResult":
        errors = [f.display() for f in findings if f.severity == FindingSeverity.ERROR]
        warnings = [f.display() for f in findings if f.severity == FindingSeverity.WARNING]
        return cls(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            findings=list(findings),
        )


# ---------------------------------------------------------------------------
# Pricing results
# ---------------------------------------------------------------------------


class AdjustmentBreakdown(BaseModel):
    """Rate adjustments (percent) and point contributions behind a result."""

    model_config = ConfigDict(frozen=True)

    base_rate: float
    product_adjustment: float = 0.0
    interest_only_adjustment: float = 0.0
    dscr_adjustment: float = 0.0
    program_adjustment: float = 0.0
    origination_fee_adjustment: float = 0.0
    loan_size_adjustment: float = 0.0
    ysp_points: float = 0.0
    prepay_points: float = 0.0
    discount_points: float = 0.0


class FeeBreakdown(BaseModel):
    """Display line items in dollars.

    Origination and YSP lines are both point based and are reported
    separately; they are not summed into ``total_fees``.
    """

    model_config = ConfigDict(frozen=True)

    origination_fee: float
    underwriting_fee: float
    ysp_fee: float
    prepay_fee: float
    loan_size_fee: float
    small_loan_fee: float | None = None


class PricingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    lender_id: str
    lender_name: str
    product: str
    base_product: str
    interest_only: bool
    base_rate: float
    final_rate: float
    points: float
    monthly_payment: float
    total_fees: float
    term_years: int
    breakdown: AdjustmentBreakdown
    fee_breakdown: FeeBreakdown


class PricingResponse(BaseModel):
    success: bool
    data: list[PricingResult] | None = None
    error: str | None = None
    validation: ValidationResult | None = None
