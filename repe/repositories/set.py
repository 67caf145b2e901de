"""Set repository. Range checks run before any write."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.constants import RPE_MAX, RPE_MIN
from repe.core.errors import StorageError
from repe.db.types import as_utc, utcnow
from repe.models.workout import WorkoutExercise, WorkoutSet

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("reps", "weight", "rpe", "rest_seconds", "notes", "performed_at")


def _is_number(value) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def _validate(values: dict) -> None:
    if "reps" in values:
        reps = values["reps"]
        if not isinstance(reps, int) or isinstance(reps, bool) or reps < 0:
            raise StorageError.validation("Reps must be a non-negative number")
    weight = values.get("weight")
    if weight is not None and (not _is_number(weight) or weight < 0):
        raise StorageError.validation("Weight must be non-negative")
    rpe = values.get("rpe")
    if rpe is not None and (not _is_number(rpe) or not RPE_MIN <= rpe <= RPE_MAX):
        raise StorageError.validation(f"RPE must be between {RPE_MIN} and {RPE_MAX}")
    rest = values.get("rest_seconds")
    if rest is not None and (not _is_number(rest) or rest < 0):
        raise StorageError.validation("Rest seconds must be non-negative")


async def add_set(
    db: AsyncSession,
    workout_exercise_id: uuid.UUID,
    reps: int,
    weight: float | None = None,
    rpe: float | None = None,
    rest_seconds: int | None = None,
    notes: str | None = None,
    performed_at: datetime | None = None,
) -> WorkoutSet:
    if not workout_exercise_id:
        raise StorageError.validation("Workout exercise ID is required")
    _validate({"reps": reps, "weight": weight, "rpe": rpe, "rest_seconds": rest_seconds})

    try:
        entry = await db.get(WorkoutExercise, workout_exercise_id)
        if entry is None:
            raise StorageError.not_found(
                f"Workout exercise with ID {workout_exercise_id} not found"
            )
        row = WorkoutSet(
            workout_exercise_id=workout_exercise_id,
            reps=reps,
            weight=weight,
            rpe=rpe,
            rest_seconds=rest_seconds,
            notes=notes,
            performed_at=as_utc(performed_at) if performed_at else utcnow(),
        )
        db.add(row)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to add set", str(exc)) from exc
    logger.debug("Logged set %s on entry %s", row.id, workout_exercise_id)
    return row


async def update_set(
    db: AsyncSession,
    set_id: uuid.UUID,
    *,
    workout_exercise_id: uuid.UUID | None = None,
    **patch,
) -> WorkoutSet:
    """Apply ``patch``; NOT_FOUND when the set (under the entry, if given) is absent."""
    unknown = set(patch) - set(UPDATABLE_FIELDS)
    if unknown:
        raise StorageError.validation(f"Unknown set fields: {', '.join(sorted(unknown))}")
    if "reps" in patch and patch["reps"] is None:
        raise StorageError.validation("Reps must be a non-negative number")
    _validate(patch)

    stmt = select(WorkoutSet).where(WorkoutSet.id == set_id)
    if workout_exercise_id is not None:
        stmt = stmt.where(WorkoutSet.workout_exercise_id == workout_exercise_id)
    try:
        row = (await db.execute(stmt)).scalar_one_or_none()
        if row is None:
            raise StorageError.not_found(f"Set with ID {set_id} not found")
        for key, value in patch.items():
            if key == "performed_at":
                if value is None:
                    continue
                value = as_utc(value)
            setattr(row, key, value)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to update set", str(exc)) from exc
    return row


async def delete_set(
    db: AsyncSession, set_id: uuid.UUID, workout_exercise_id: uuid.UUID | None = None
) -> bool:
    stmt = delete(WorkoutSet).where(WorkoutSet.id == set_id)
    if workout_exercise_id is not None:
        stmt = stmt.where(WorkoutSet.workout_exercise_id == workout_exercise_id)
    try:
        result = await db.execute(stmt.returning(WorkoutSet.id))
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to delete set", str(exc)) from exc
    return result.scalar_one_or_none() is not None


async def list_sets_by_workout(
    db: AsyncSession,
    workout_exercise_id: uuid.UUID,
    limit: int | None = None,
    offset: int | None = None,
) -> list[WorkoutSet]:
    """Sets of one workout exercise, most recent first."""
    stmt = (
        select(WorkoutSet)
        .where(WorkoutSet.workout_exercise_id == workout_exercise_id)
        .order_by(WorkoutSet.performed_at.desc(), WorkoutSet.id.desc())
    )
    if limit:
        stmt = stmt.limit(max(1, limit))
    if offset:
        stmt = stmt.offset(max(0, offset))
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to list sets", str(exc)) from exc
    return list(result.scalars().all())
