# This project was developed with assistance from AI tools.
"""Property type normalization.

Broker forms send free-text property types; lender matrices list their own
canonical names. Both the eligibility validator and the program adjustment
map through the same synonym table.
"""

SFR = "1-4 Unit SFR"
CONDO = "Condos"
TOWNHOME = "Townhomes"
TWO_TO_FOUR_UNITS = "2-4 Units"

_SYNONYMS: dict[str, str] = {
    "single family": SFR,
    "single_family": SFR,
    "sfr": SFR,
    "1-4 unit sfr": SFR,
    "condo": CONDO,
    "condos": CONDO,
    "townhouse": TOWNHOME,
    "townhome": TOWNHOME,
    "townhomes": TOWNHOME,
    "multi family": TWO_TO_FOUR_UNITS,
    "multi family (2-4 units)": TWO_TO_FOUR_UNITS,
    "2-4 units": TWO_TO_FOUR_UNITS,
    "2-4_units": TWO_TO_FOUR_UNITS,
}

_FIVE_PLUS_UNITS = {"multi family (5+ units)", "5+ units", "5+_units"}


def canonical_property_type(property_type: str) -> str:
    """Map a free-text property type to its canonical name.

    Unknown values pass through stripped so a matrix can still list them
    verbatim.
    """
    cleaned = property_type.strip()
    return _SYNONYMS.get(cleaned.lower(), cleaned)


def is_five_plus_units(property_type: str) -> bool:
    return property_type.strip().lower() in _FIVE_PLUS_UNITS
