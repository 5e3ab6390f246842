# This project was developed with assistance from AI tools.
"""CLI entrypoint for pricing matrix seeding.

Usage:
    python -m pricing_api.seed                  # Seed matrices from config/matrices
    python -m pricing_api.seed --force          # Replace existing matrices
    python -m pricing_api.seed --path ./other   # Seed from another directory
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from db.database import SessionLocal

from .core.config import settings
from .services.seed.seeder import seed_pricing_matrices


async def main(directory: Path, force: bool = False) -> None:
    """Run matrix seeding."""
    async with SessionLocal() as session:
        result = await seed_pricing_matrices(session, directory, force=force)
        print(json.dumps(result, indent=2, default=str))

        if result.get("status") == "already_seeded":
            print("\nMatrices already seeded. Use --force to replace them.")
            sys.exit(0)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed lender pricing matrices")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Replace matrices that already exist",
    )
    parser.add_argument(
        "--path",
        type=Path,
        default=settings.MATRIX_SEED_DIR,
        help="Directory of YAML matrix documents",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
    asyncio.run(main(args.path, force=args.force))
