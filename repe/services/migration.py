"""Move legacy JSON data into the database and compare the two.

Used by ``scripts/seed_exercises.py`` and ``scripts/backfill.py``.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.config import get_settings
from repe.core.enums import WorkoutSource
from repe.core.errors import StorageError
from repe.db.types import as_utc, dialect_insert
from repe.models.exercise import Exercise
from repe.models.history import History
from repe.models.workout import Workout
from repe.schemas.exercise import ExerciseSeed
from repe.schemas.legacy import LegacyWorkoutSession
from repe.storage.atomic import read_json
from repe.storage.json_store import WORKOUTS_FILE

logger = logging.getLogger(__name__)

EXERCISE_SEED_FILE = "exercise-library-seed.json"


@dataclass
class BackfillResult:
    inserted: int = 0
    skipped: int = 0


@dataclass
class ParityReport:
    json: dict[str, int] = field(default_factory=dict)
    db: dict[str, int] = field(default_factory=dict)

    @property
    def is_consistent(self) -> bool:
        return self.json == self.db


def _data_dir(data_dir: str | Path | None) -> Path:
    return Path(data_dir or get_settings().data_dir)


def load_json_list(path: Path) -> list:
    try:
        data = read_json(path, default=[])
    except json.JSONDecodeError as exc:
        raise StorageError.validation(f"{path} is not valid JSON", str(exc)) from exc
    if not isinstance(data, list):
        raise StorageError.validation(f"Expected array in {path}")
    return data


def _parse_uuid(value) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


async def _insert_row(db: AsyncSession, stmt) -> bool:
    """Run one INSERT ... ON CONFLICT DO NOTHING in its own savepoint."""
    async with db.begin_nested():
        return (await db.execute(stmt)).first() is not None


async def backfill_exercises(
    db: AsyncSession, data_dir: str | Path | None = None
) -> BackfillResult:
    """Load ``exercise-library-seed.json`` row by row; existing names are skipped."""
    path = _data_dir(data_dir) / EXERCISE_SEED_FILE
    result = BackfillResult()
    if not path.exists():
        logger.warning("Seed file not found at %s", path)
        return result

    for raw in load_json_list(path):
        try:
            seed = ExerciseSeed.model_validate(raw)
        except ValidationError:
            logger.warning("Skipping invalid exercise seed row: %r", raw)
            result.skipped += 1
            continue
        stmt = (
            dialect_insert(db, Exercise)
            .values(
                id=_parse_uuid(raw.get("id")) or uuid.uuid4(),
                name=seed.name.strip(),
                category=seed.category.strip(),
                equipment=seed.equipment,
                notes=seed.notes,
            )
            .on_conflict_do_nothing()
            .returning(Exercise.id)
        )
        try:
            inserted = await _insert_row(db, stmt)
        except SQLAlchemyError as exc:
            logger.warning("Error inserting exercise %s: %s", seed.name, exc)
            result.skipped += 1
            continue
        if inserted:
            result.inserted += 1
        else:
            result.skipped += 1

    logger.info("Exercise backfill: %d inserted, %d skipped", result.inserted, result.skipped)
    return result


async def backfill_workouts(
    db: AsyncSession, data_dir: str | Path | None = None
) -> BackfillResult:
    """Import legacy workout sessions as workouts plus one history row each.

    Sessions whose id is not a UUID or that fail validation are skipped; the
    history row is only written for a session with an end time.
    """
    path = _data_dir(data_dir) / WORKOUTS_FILE
    result = BackfillResult()
    if not path.exists():
        return result

    for raw in load_json_list(path):
        try:
            session = LegacyWorkoutSession.model_validate(raw)
        except ValidationError:
            logger.warning("Skipping invalid workout session: %r", raw.get("id") if isinstance(raw, dict) else raw)
            result.skipped += 1
            continue
        workout_id = _parse_uuid(session.id)
        if workout_id is None:
            result.skipped += 1
            continue

        stmt = (
            dialect_insert(db, Workout)
            .values(
                id=workout_id,
                name=(session.name or "").strip() or "Workout",
                user_id=session.user_id,
                source=WorkoutSource.IMPORTED.value,
                created_at=as_utc(session.created_at),
                updated_at=as_utc(session.updated_at),
            )
            .on_conflict_do_nothing()
            .returning(Workout.id)
        )
        try:
            inserted = await _insert_row(db, stmt)
            if inserted and session.end_time is not None:
                duration = int((session.end_time - session.start_time).total_seconds())
                db.add(
                    History(
                        workout_id=workout_id,
                        performed_at=as_utc(session.start_time),
                        duration_seconds=max(0, duration),
                        notes=session.notes,
                    )
                )
                await db.flush()
        except SQLAlchemyError as exc:
            logger.warning("Error inserting workout %s: %s", session.id, exc)
            result.skipped += 1
            continue
        if inserted:
            result.inserted += 1
        else:
            result.skipped += 1

    logger.info("Workout backfill: %d inserted, %d skipped", result.inserted, result.skipped)
    return result


def count_json_data(data_dir: str | Path | None = None) -> dict[str, int]:
    base = _data_dir(data_dir)
    counts = {"exercises": 0, "workouts": 0, "history": 0}
    try:
        seeds = read_json(base / EXERCISE_SEED_FILE, default=[])
        sessions = read_json(base / WORKOUTS_FILE, default=[])
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Error reading JSON files: %s", exc)
        return counts
    if isinstance(seeds, list):
        counts["exercises"] = len(seeds)
    if isinstance(sessions, list):
        counts["workouts"] = len(sessions)
        # finished sessions become history rows on backfill
        counts["history"] = sum(1 for s in sessions if isinstance(s, dict) and s.get("endTime"))
    return counts


async def check_parity(db: AsyncSession, data_dir: str | Path | None = None) -> ParityReport:
    """Compare JSON file counts with database row counts."""
    try:
        db_counts = {
            "exercises": await db.scalar(select(func.count()).select_from(Exercise)) or 0,
            "workouts": await db.scalar(select(func.count()).select_from(Workout)) or 0,
            "history": await db.scalar(select(func.count()).select_from(History)) or 0,
        }
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to check parity", str(exc)) from exc
    return ParityReport(json=count_json_data(data_dir), db=db_counts)


async def check_database_health(db: AsyncSession) -> dict:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return {"connected": False, "message": str(exc)}
    return {"connected": True, "message": "Database connected"}
