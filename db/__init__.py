# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, get_db
from .enums import LoanPurpose, RuleCategory
from .models import PricingMatrixRecord

__all__ = [
    "Base",
    "get_db",
    "__version__",
    # Enums
    "LoanPurpose",
    "RuleCategory",
    # Models
    "PricingMatrixRecord",
]
