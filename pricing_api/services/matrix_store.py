# This project was developed with assistance from AI tools.
"""Matrix Store service.

Reads lender pricing matrices from the pricing_matrices table. Documents
are validated into ``PricingMatrix`` here, once, so the engine never sees
an untyped payload.
"""

import logging

from db import PricingMatrixRecord
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.matrix import PricingMatrix

logger = logging.getLogger(__name__)


class MatrixNotFoundError(LookupError):
    """No active matrix exists for the lender and loan program."""

    def __init__(self, lender_id: str, loan_program: str):
        self.lender_id = lender_id
        self.loan_program = loan_program
        super().__init__(f"No pricing matrix for lender {lender_id!r}, program {loan_program!r}")


async def get_matrix_record(
    session: AsyncSession,
    lender_id: str,
    loan_program: str,
) -> PricingMatrixRecord | None:
    stmt = select(PricingMatrixRecord).where(
        PricingMatrixRecord.lender_id == lender_id,
        PricingMatrixRecord.loan_program == loan_program,
        PricingMatrixRecord.is_active.is_(True),
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_pricing_matrix(
    session: AsyncSession,
    lender_id: str,
    loan_program: str,
) -> PricingMatrix:
    """Fetch and validate the active matrix for a lender/program.

    Raises:
        MatrixNotFoundError: no active row exists.
        pydantic.ValidationError: the stored document does not match the
            matrix schema.
    """
    record = await get_matrix_record(session, lender_id, loan_program)
    if record is None:
        raise MatrixNotFoundError(lender_id, loan_program)
    logger.debug("Loaded matrix id=%s for %s/%s", record.id, lender_id, loan_program)
    return PricingMatrix.model_validate(record.matrix)


async def list_pricing_matrices(
    session: AsyncSession,
    lender_id: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[PricingMatrixRecord], int]:
    """Return a page of matrix rows and the total count."""
    count_stmt = select(func.count(PricingMatrixRecord.id))
    stmt = select(PricingMatrixRecord)
    if lender_id is not None:
        count_stmt = count_stmt.where(PricingMatrixRecord.lender_id == lender_id)
        stmt = stmt.where(PricingMatrixRecord.lender_id == lender_id)

    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        stmt.order_by(PricingMatrixRecord.lender_id, PricingMatrixRecord.loan_program)
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total
