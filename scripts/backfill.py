"""Copy legacy JSON data into the database, then report count parity.

Usage:
    python scripts/backfill.py [--data-dir DIR] [--check-only]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from repe.core.config import get_settings
from repe.core.logging import configure_logging
from repe.db.session import Database
from repe.services.migration import (
    backfill_exercises,
    backfill_workouts,
    check_database_health,
    check_parity,
)

logger = logging.getLogger("backfill")


async def main(data_dir: Path, check_only: bool) -> bool:
    database = Database()
    try:
        async with database.session() as session:
            health = await check_database_health(session)
            if not health["connected"]:
                logger.error("Database unavailable: %s", health["message"])
                return False

            if not check_only:
                exercises = await backfill_exercises(session, data_dir)
                workouts = await backfill_workouts(session, data_dir)
                await session.commit()
                logger.info(
                    "Backfill done: exercises %d/%d, workouts %d/%d (inserted/skipped)",
                    exercises.inserted,
                    exercises.skipped,
                    workouts.inserted,
                    workouts.skipped,
                )

            report = await check_parity(session, data_dir)
    finally:
        await database.dispose()

    for key in sorted(report.json):
        logger.info("%-10s json=%d db=%d", key, report.json[key], report.db.get(key, 0))
    if not report.is_consistent:
        logger.warning("JSON and database counts differ")
    return report.is_consistent


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--data-dir", type=Path, default=None)
    parser.add_argument("--check-only", action="store_true", help="only compare counts")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    ok = asyncio.run(main(args.data_dir or Path(settings.data_dir), args.check_only))
    sys.exit(0 if ok else 1)
