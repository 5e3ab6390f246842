# This project was developed with assistance from AI tools.
"""Pricing matrix schemas.

Typed shape of a lender's pricing/eligibility matrix document. Matrix
documents arrive as loosely-typed JSON from the Matrix Store and are
validated once here; the pricing engine only ever sees these models.

Tables keyed by bucket strings (``"680-699"``, ``"<55"``, ``">=2000000"``,
``"760+"``) are parsed into ``RangeKey`` values at load time so lookups
never re-parse strings.
"""

import enum
import logging
import re
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)

from db.enums import RuleCategory

from . import Pagination

logger = logging.getLogger(__name__)

# Reserved key in rate_structure.products holding the flat interest-only add-on.
INTEREST_ONLY_KEY = "Interest_Only"

_NUMBER = r"\d+(?:\.\d+)?"
_BOUNDED = re.compile(rf"^({_NUMBER})\s*-\s*({_NUMBER})$")
_LOWER = re.compile(rf"^(>=|>)\s*({_NUMBER})$")
_UPPER = re.compile(rf"^(<=|<)\s*({_NUMBER})$")
_OPEN_ENDED = re.compile(rf"^({_NUMBER})\s*\+$")
_EXACT_NUMBER = re.compile(rf"^({_NUMBER})\s*%?$")


class RangeKind(str, enum.Enum):
    EXACT = "exact"
    BOUNDED = "bounded"
    LOWER_BOUND = "lower_bound"
    UPPER_BOUND = "upper_bound"


class RangeKey(BaseModel):
    """A parsed table key.

    ``bounded`` ranges are inclusive on both ends. ``lower_bound`` and
    ``upper_bound`` carry an ``inclusive`` flag (``>=``/``<=`` vs ``>``/``<``).
    ``exact`` keys match either a number (``low``) or a literal string
    (``text``).
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    kind: RangeKind
    low: float | None = None
    high: float | None = None
    inclusive: bool = True
    text: str | None = None

    @classmethod
    def parse(cls, key: str) -> "RangeKey":
        cleaned = key.strip().replace(",", "").replace("$", "")

        if match := _BOUNDED.match(cleaned):
            low, high = float(match.group(1)), float(match.group(2))
            return cls(raw=key, kind=RangeKind.BOUNDED, low=low, high=high)
        if match := _LOWER.match(cleaned):
            return cls(
                raw=key,
                kind=RangeKind.LOWER_BOUND,
                low=float(match.group(2)),
                inclusive=match.group(1) == ">=",
            )
        if match := _UPPER.match(cleaned):
            return cls(
                raw=key,
                kind=RangeKind.UPPER_BOUND,
                high=float(match.group(2)),
                inclusive=match.group(1) == "<=",
            )
        if match := _OPEN_ENDED.match(cleaned):
            return cls(raw=key, kind=RangeKind.LOWER_BOUND, low=float(match.group(1)))
        if match := _EXACT_NUMBER.match(cleaned):
            value = float(match.group(1))
            return cls(raw=key, kind=RangeKind.EXACT, low=value, high=value)
        return cls(raw=key, kind=RangeKind.EXACT, text=key.strip())

    def contains(self, value: float) -> bool:
        """Return True when ``value`` falls inside this key's range."""
        if self.kind == RangeKind.BOUNDED:
            return self.low <= value <= self.high
        if self.kind == RangeKind.LOWER_BOUND:
            return value >= self.low if self.inclusive else value > self.low
        if self.kind == RangeKind.UPPER_BOUND:
            return value <= self.high if self.inclusive else value < self.high
        # exact
        return self.low is not None and value == self.low


class RangeEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: RangeKey
    value: float


def _numeric(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


class RangeTable(BaseModel):
    """Ordered bucket-key -> number table. Lookup is first match wins.

    Accepts the document form (``{"<55": 6.5, "55-60": 6.625}``) and dumps
    back to it. Non-numeric entries (inline notes) are dropped.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[RangeEntry, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _from_document(cls, data: Any) -> Any:
        if not isinstance(data, dict) or set(data) == {"entries"}:
            return data
        entries = []
        for raw_key, raw_value in data.items():
            value = _numeric(raw_value)
            if value is None:
                logger.debug("Dropping non-numeric table entry %r", raw_key)
                continue
            entries.append({"key": RangeKey.parse(str(raw_key)), "value": value})
        return {"entries": entries}

    @model_serializer
    def _to_document(self) -> dict[str, float]:
        return {entry.key.raw: entry.value for entry in self.entries}

    def lookup(self, value: float) -> RangeEntry | None:
        for entry in self.entries:
            if entry.key.contains(value):
                return entry
        return None

    def keys(self) -> list[str]:
        return [entry.key.raw for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


class FicoTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: RangeKey
    ltv_bands: RangeTable


class BaseRateTable(BaseModel):
    """Two-level base-rate grid: FICO band -> LTV band -> annual rate."""

    model_config = ConfigDict(frozen=True)

    tiers: tuple[FicoTier, ...] = ()

    @field_validator("tiers", mode="before")
    @classmethod
    def _parse_tiers(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return [
            {"key": RangeKey.parse(str(fico_key)), "ltv_bands": ltv_bands}
            for fico_key, ltv_bands in value.items()
        ]

    @model_serializer
    def _to_document(self) -> dict[str, Any]:
        return {"tiers": {tier.key.raw: tier.ltv_bands.model_dump() for tier in self.tiers}}

    def find_tier(self, fico: float) -> FicoTier | None:
        for tier in self.tiers:
            if tier.key.contains(fico):
                return tier
        return None


# ---------------------------------------------------------------------------
# Matrix sections
# ---------------------------------------------------------------------------


class MatrixMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    loan_originators: list[str] = Field(default_factory=list)
    not_available_in_states: list[str] = Field(default_factory=list)
    nmls_ids: dict[str, str] = Field(default_factory=dict)


class SmallLoanFeeRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float


class SmallLoanFee(BaseModel):
    """Flat fee charged when the loan amount falls inside ``range`` (inclusive)."""

    model_config = ConfigDict(frozen=True)

    amount: float
    range: SmallLoanFeeRange

    def applies(self, loan_amount: float) -> bool:
        return self.range.min <= loan_amount <= self.range.max


class LoanTerms(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: str = "30 Year"
    amortization: str = ""
    max_ltv: float
    underwriting_fee: float = 0.0
    small_loan_fee: SmallLoanFee | None = None


class CreditRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    middle_score_used: bool = True
    min_active_tradelines: bool = False
    dil_seasoning_years: float = 0
    late_payment_limitations: bool = False
    refinance_min_fico: int | None = None


class BorrowerRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    borrower_types: list[str] = Field(default_factory=list)
    entity_types: list[str] = Field(default_factory=list)
    citizenship: list[str] = Field(default_factory=list)
    min_assets_reserves_months: float = 0
    credit: CreditRequirements = Field(default_factory=CreditRequirements)


class PropertyRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    property_types: list[str] = Field(default_factory=list)
    min_value: float = 0
    condition: list[str] = Field(default_factory=list)
    dscr_min: float = 0
    lease_status: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------


class NumericBounds(BaseModel):
    """Numeric predicate; every bound that is set must hold.

    ``min``/``max`` are inclusive aliases for ``gte``/``lte``.
    """

    model_config = ConfigDict(frozen=True)

    lt: float | None = None
    gt: float | None = None
    gte: float | None = None
    lte: float | None = None
    min: float | None = None
    max: float | None = None

    def contains(self, value: float) -> bool:
        if self.lt is not None and not value < self.lt:
            return False
        if self.gt is not None and not value > self.gt:
            return False
        if self.gte is not None and not value >= self.gte:
            return False
        if self.lte is not None and not value <= self.lte:
            return False
        if self.min is not None and not value >= self.min:
            return False
        if self.max is not None and not value <= self.max:
            return False
        return True


class RuleCondition(BaseModel):
    # Unknown keys are kept so the validator can report them.
    model_config = ConfigDict(frozen=True, extra="allow")

    loan_purpose: str | None = None
    loan_amount: NumericBounds | None = None
    dscr: NumericBounds | None = None
    fico: NumericBounds | None = None
    prepay_structure: str | None = None
    product: str | None = None

    def unrecognized_keys(self) -> list[str]:
        return sorted(self.model_extra or {})


class RuleRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_fico: int | None = None
    max_ltv: float | None = None
    zero_prepay_required: bool | None = None
    product: str | None = None
    interest_only: bool | None = None
    min_dscr: float | None = None
    min_rate: float | None = None


class RuleRestrictions(BaseModel):
    model_config = ConfigDict(frozen=True)

    prepay_structures: list[str] | None = None
    interest_only: bool | None = None


class BusinessRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    condition: RuleCondition | None = None
    requirements: RuleRequirements | None = None
    restrictions: RuleRestrictions | None = None
    error_message: str = ""


class StateRule(BusinessRule):
    states: list[str] = Field(default_factory=list)


class BusinessRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    state_rules: list[StateRule] = Field(default_factory=list)
    loan_purpose_rules: list[BusinessRule] = Field(default_factory=list)
    prepayment_penalty_rules: list[BusinessRule] = Field(default_factory=list)
    dscr_ltv_rules: list[BusinessRule] = Field(default_factory=list)
    product_rules: list[BusinessRule] = Field(default_factory=list)
    rate_rules: list[BusinessRule] = Field(default_factory=list)

    def for_category(self, category: RuleCategory) -> list[BusinessRule]:
        return getattr(self, category.value)


# ---------------------------------------------------------------------------
# Rate structure
# ---------------------------------------------------------------------------


class DscrAdjustments(BaseModel):
    model_config = ConfigDict(frozen=True)

    dscr_gt_1_20: float = 0.0
    dscr_lt_1_00_to_0_75_ltv_le_65: float = 0.0
    dscr_lt_1_00: str | None = None


class ProgramAdjustments(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cash_out_refinance: float = 0.0
    short_term_rental: float = 0.0
    condo: float = 0.0
    two_to_four_units: float = Field(default=0.0, alias="2_4_units")
    units_adjustment: float = 0.0
    dscr_adjustments: DscrAdjustments = Field(default_factory=DscrAdjustments)


class RateStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    products: dict[str, float]
    origination_fee_adjustments: RangeTable = Field(default_factory=RangeTable)
    loan_size_adjustments: RangeTable = Field(default_factory=RangeTable)
    prepay_penalty_structures: dict[str, float] = Field(default_factory=dict)
    program_adjustments: ProgramAdjustments = Field(default_factory=ProgramAdjustments)
    minimum_rate: float = 0.0

    @field_validator("prepay_penalty_structures", mode="before")
    @classmethod
    def _drop_notes(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {key: num for key, raw in value.items() if (num := _numeric(raw)) is not None}

    def base_products(self) -> list[str]:
        """Declared base products, in document order."""
        return [name for name in self.products if name != INTEREST_ONLY_KEY]

    @property
    def interest_only_adjustment(self) -> float:
        return self.products.get(INTEREST_ONLY_KEY, 0.0)


class PricingMatrix(BaseModel):
    """A lender's full pricing/eligibility matrix for one loan program."""

    model_config = ConfigDict(frozen=True)

    lender: str
    date: str = ""
    meta: MatrixMeta = Field(default_factory=MatrixMeta)
    loan_terms: LoanTerms
    borrower_requirements: BorrowerRequirements = Field(default_factory=BorrowerRequirements)
    property_requirements: PropertyRequirements = Field(default_factory=PropertyRequirements)
    business_rules: BusinessRules = Field(default_factory=BusinessRules)
    rate_structure: RateStructure
    base_rates: BaseRateTable
    broker_payout_add_ons: RangeTable = Field(default_factory=RangeTable)


# ---------------------------------------------------------------------------
# Matrix Store responses
# ---------------------------------------------------------------------------


class MatrixSummary(BaseModel):
    """One stored matrix, without its document body."""

    id: int
    lender_id: str
    loan_program: str
    effective_date: str | None = None
    is_active: bool


class MatrixListResponse(BaseModel):
    data: list[MatrixSummary]
    pagination: Pagination
