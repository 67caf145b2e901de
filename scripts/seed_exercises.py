"""Seed the exercise library from data/exercise-library-seed.json.

Usage:
    python scripts/seed_exercises.py [--data-dir DIR] [--dry-run]

Existing names are left alone, so the script can be re-run safely.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from repe.core.config import get_settings
from repe.core.logging import configure_logging
from repe.db.session import Database
from repe.repositories.exercise import bulk_seed_exercises
from repe.services.migration import EXERCISE_SEED_FILE, load_json_list

logger = logging.getLogger("seed_exercises")


async def main(data_dir: Path, dry_run: bool) -> int:
    rows = load_json_list(data_dir / EXERCISE_SEED_FILE)
    logger.info("Loaded %d exercises from %s", len(rows), data_dir / EXERCISE_SEED_FILE)
    if dry_run:
        for row in rows:
            logger.info("  %s (%s)", row.get("name"), row.get("category"))
        return 0

    database = Database()
    try:
        async with database.session() as session:
            inserted = await bulk_seed_exercises(session, rows)
            await session.commit()
    finally:
        await database.dispose()
    logger.info("Seeded %d new exercises (%d already present)", inserted, len(rows) - inserted)
    return inserted


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--data-dir", type=Path, default=None)
    parser.add_argument("--dry-run", action="store_true", help="list rows without writing")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    asyncio.run(main(args.data_dir or Path(settings.data_dir), args.dry_run))
