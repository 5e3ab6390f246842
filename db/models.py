# This project was developed with assistance from AI tools.
"""
Broker portal -- pricing matrix storage

Each row holds one lender's matrix document for one loan program. The
document itself is stored as JSON and validated by the API layer when read.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from .database import Base


class PricingMatrixRecord(Base):
    """A lender's pricing/eligibility matrix for a single loan program."""

    __tablename__ = "pricing_matrices"
    __table_args__ = (
        UniqueConstraint("lender_id", "loan_program", name="uq_pricing_matrix_lender_program"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    lender_id = Column(String(100), nullable=False, index=True)
    loan_program = Column(String(100), nullable=False)
    effective_date = Column(String(32), nullable=True)
    matrix = Column(JSON, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self):
        return (
            f"<PricingMatrixRecord(id={self.id}, lender_id='{self.lender_id}', "
            f"loan_program='{self.loan_program}')>"
        )
