# This project was developed with assistance from AI tools.
"""Pricing matrix seeding service.

Loads lender matrix documents from YAML files and writes them into the
pricing_matrices table. Each file holds one document::

    lender_id: visio
    loan_program: dscr
    matrix: { ...PricingMatrix document... }

Documents are validated against ``PricingMatrix`` before anything is
written, so a bad file never lands in the store.
"""

import logging
from pathlib import Path

import yaml
from db import PricingMatrixRecord
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...schemas.matrix import PricingMatrix

logger = logging.getLogger(__name__)


class MatrixSeedDocument(BaseModel):
    """One YAML seed file."""

    lender_id: str = Field(min_length=1)
    loan_program: str = Field(min_length=1)
    is_active: bool = True
    matrix: PricingMatrix


def load_seed_documents(directory: Path) -> list[tuple[MatrixSeedDocument, dict]]:
    """Parse every ``*.yaml``/``*.yml`` file in ``directory``, sorted by name.

    Returns each validated document alongside the raw matrix dict; the raw
    form is what gets stored.

    Raises:
        FileNotFoundError: ``directory`` does not exist.
        pydantic.ValidationError: a file does not match the matrix schema.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Matrix seed directory not found: {directory}")

    paths = sorted([*directory.glob("*.yaml"), *directory.glob("*.yml")])
    documents = []
    for path in paths:
        with open(path) as f:
            raw = yaml.safe_load(f)
        if not isinstance(raw, dict):
            logger.warning("Skipping %s: not a mapping", path.name)
            continue
        document = MatrixSeedDocument.model_validate(raw)
        documents.append((document, raw["matrix"]))
        logger.debug("Parsed %s (%s/%s)", path.name, document.lender_id, document.loan_program)
    return documents


async def _find_existing(
    session: AsyncSession,
    lender_id: str,
    loan_program: str,
) -> PricingMatrixRecord | None:
    result = await session.execute(
        select(PricingMatrixRecord).where(
            PricingMatrixRecord.lender_id == lender_id,
            PricingMatrixRecord.loan_program == loan_program,
        )
    )
    return result.scalar_one_or_none()


async def seed_pricing_matrices(
    session: AsyncSession,
    directory: Path,
    force: bool = False,
) -> dict:
    """Insert matrices from ``directory``; replace existing rows only with ``force``.

    Returns:
        Summary dict with status and the lender/program pairs created,
        updated, and skipped.
    """
    documents = load_seed_documents(directory)
    created: list[str] = []
    updated: list[str] = []
    skipped: list[str] = []

    for document, raw_matrix in documents:
        label = f"{document.lender_id}/{document.loan_program}"
        existing = await _find_existing(session, document.lender_id, document.loan_program)

        if existing is not None and not force:
            skipped.append(label)
            continue

        if existing is None:
            session.add(
                PricingMatrixRecord(
                    lender_id=document.lender_id,
                    loan_program=document.loan_program,
                    effective_date=document.matrix.date or None,
                    matrix=raw_matrix,
                    is_active=document.is_active,
                )
            )
            created.append(label)
        else:
            existing.matrix = raw_matrix
            existing.effective_date = document.matrix.date or None
            existing.is_active = document.is_active
            updated.append(label)

    await session.commit()

    status = "seeded" if created or updated else "already_seeded"
    logger.info(
        "Matrix seeding %s: %d created, %d updated, %d skipped",
        status,
        len(created),
        len(updated),
        len(skipped),
    )
    return {
        "status": status,
        "created": created,
        "updated": updated,
        "skipped": skipped,
    }
