"""Workout repository: listing, detail, transactional upsert and entry CRUD."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from repe.core.constants import DEFAULT_PAGE_SIZE
from repe.core.enums import WorkoutSource
from repe.core.errors import StorageError
from repe.db.types import as_utc, utcnow
from repe.models.exercise import Exercise
from repe.models.workout import Workout, WorkoutExercise
from repe.repositories import exercise as exercise_repo
from repe.schemas.workout import (
    WorkoutExerciseCreate,
    WorkoutExerciseInput,
    WorkoutExerciseUpdate,
    WorkoutPatch,
    WorkoutUpsert,
)

logger = logging.getLogger(__name__)


def _parse(schema: type[BaseModel], payload, message: str):
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    if not isinstance(payload, Mapping):
        raise StorageError.validation(message)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise StorageError.validation(
            message, exc.errors(include_url=False, include_context=False)
        ) from exc


def _detail_query():
    return select(Workout).options(
        selectinload(Workout.exercises).selectinload(WorkoutExercise.exercise),
        selectinload(Workout.exercises).selectinload(WorkoutExercise.sets),
    )


async def list_workouts(
    db: AsyncSession, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
) -> list[Workout]:
    """Newest first, each with its ordered exercise entries."""
    try:
        result = await db.execute(
            select(Workout)
            .options(selectinload(Workout.exercises))
            .order_by(Workout.created_at.desc(), Workout.id.desc())
            .limit(max(1, limit))
            .offset(max(0, offset))
        )
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to list workouts", str(exc)) from exc
    return list(result.scalars().all())


async def count_workouts(db: AsyncSession) -> int:
    try:
        return await db.scalar(select(func.count()).select_from(Workout)) or 0
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to count workouts", str(exc)) from exc


async def get_workout(db: AsyncSession, workout_id: uuid.UUID) -> Workout | None:
    """Workout with entries (ordered), each entry's exercise and sets; None if absent."""
    try:
        result = await db.execute(
            _detail_query()
            .where(Workout.id == workout_id)
            .execution_options(populate_existing=True)
        )
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to get workout", str(exc)) from exc
    return result.scalar_one_or_none()


async def _resolve_exercise_id(db: AsyncSession, entry: WorkoutExerciseInput) -> uuid.UUID:
    if entry.exercise_id is not None:
        exercise = await db.get(Exercise, entry.exercise_id)
        if exercise is None:
            raise StorageError.not_found(f"Exercise with ID {entry.exercise_id} not found")
        return exercise.id
    if entry.name and entry.name.strip():
        exercise = await exercise_repo.find_or_create_exercise(db, entry.name, entry.category)
        return exercise.id
    raise StorageError.validation("Each exercise needs an id or a name")


async def _save_workout_row(db: AsyncSession, payload: WorkoutUpsert, name: str) -> uuid.UUID:
    if payload.id is not None:
        result = await db.execute(
            update(Workout)
            .where(Workout.id == payload.id)
            .values(name=name, updated_at=utcnow())
            .returning(Workout.id)
        )
        if result.scalar_one_or_none() is not None:
            return payload.id

    workout = Workout(
        id=payload.id or uuid.uuid4(),
        name=name,
        source=(payload.source or WorkoutSource.CUSTOM).value,
    )
    if payload.start_time is not None:
        workout.created_at = as_utc(payload.start_time)
    db.add(workout)
    await db.flush()
    return workout.id


async def upsert_workout(db: AsyncSession, payload: WorkoutUpsert | Mapping) -> Workout:
    """Create or update a workout and fully replace its exercise entries.

    With ``id``: update, falling back to an insert with that id when no row
    matched. Existing entries are deleted and the payload's entries inserted,
    resolving each exercise by id or by name (find-or-create). Everything
    happens inside a savepoint, so a failure leaves the previous state intact.
    """
    payload = _parse(WorkoutUpsert, payload, "Invalid workout payload")
    name = payload.name.strip()
    if not name:
        raise StorageError.validation("Workout name is required")

    positions = [
        e.order_index if e.order_index is not None else i
        for i, e in enumerate(payload.exercises)
    ]
    if len(set(positions)) != len(positions):
        raise StorageError.validation("Exercise orderIndex values must be unique")

    try:
        async with db.begin_nested():
            workout_id = await _save_workout_row(db, payload, name)
            await db.execute(
                delete(WorkoutExercise).where(WorkoutExercise.workout_id == workout_id)
            )
            for entry, position in zip(payload.exercises, positions):
                exercise_id = await _resolve_exercise_id(db, entry)
                db.add(
                    WorkoutExercise(
                        workout_id=workout_id,
                        exercise_id=exercise_id,
                        order_index=position,
                        target_sets=entry.target_sets,
                        target_reps=entry.target_reps,
                        target_weight=entry.target_weight,
                    )
                )
            await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to upsert workout", str(exc)) from exc

    detail = await get_workout(db, workout_id)
    if detail is None:
        raise StorageError.internal("Failed to retrieve saved workout", str(workout_id))
    logger.info("Saved workout %s with %d exercises", workout_id, len(detail.exercises))
    return detail


async def patch_workout(
    db: AsyncSession, workout_id: uuid.UUID, patch: WorkoutPatch | Mapping
) -> Workout:
    """Partial update. Entries (and their sets) are only replaced when given."""
    patch = _parse(WorkoutPatch, patch, "Invalid workout payload")
    current = await get_workout(db, workout_id)
    if current is None:
        raise StorageError.not_found(f"Workout with ID {workout_id} not found")

    if patch.exercises is not None:
        return await upsert_workout(
            db,
            WorkoutUpsert(
                id=workout_id,
                name=patch.name if patch.name is not None else current.name,
                exercises=patch.exercises,
            ),
        )

    if patch.name is not None:
        name = patch.name.strip()
        if not name:
            raise StorageError.validation("Workout name is required")
        current.name = name
        current.updated_at = utcnow()
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            raise StorageError.internal("Failed to update workout", str(exc)) from exc
    return await get_workout(db, workout_id)


async def delete_workout(db: AsyncSession, workout_id: uuid.UUID) -> bool:
    """Delete a workout; entries and sets cascade, history keeps a NULL workout_id."""
    try:
        result = await db.execute(
            delete(Workout).where(Workout.id == workout_id).returning(Workout.id)
        )
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to delete workout", str(exc)) from exc
    deleted = result.scalar_one_or_none() is not None
    if deleted:
        logger.info("Deleted workout %s", workout_id)
    return deleted


async def get_workout_exercise(
    db: AsyncSession, entry_id: uuid.UUID, workout_id: uuid.UUID | None = None
) -> WorkoutExercise | None:
    stmt = (
        select(WorkoutExercise)
        .options(selectinload(WorkoutExercise.exercise))
        .where(WorkoutExercise.id == entry_id)
    )
    if workout_id is not None:
        stmt = stmt.where(WorkoutExercise.workout_id == workout_id)
    try:
        return (await db.execute(stmt)).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to get workout exercise", str(exc)) from exc


async def _position_taken(
    db: AsyncSession, workout_id: uuid.UUID, order_index: int, exclude: uuid.UUID | None = None
) -> bool:
    stmt = select(WorkoutExercise.id).where(
        WorkoutExercise.workout_id == workout_id,
        WorkoutExercise.order_index == order_index,
    )
    if exclude is not None:
        stmt = stmt.where(WorkoutExercise.id != exclude)
    return (await db.execute(stmt.limit(1))).first() is not None


async def add_workout_exercise(
    db: AsyncSession, workout_id: uuid.UUID, entry: WorkoutExerciseCreate | Mapping
) -> WorkoutExercise:
    """Append an exercise to a workout (or place it at ``order_index``)."""
    entry = _parse(WorkoutExerciseCreate, entry, "Invalid workout exercise")
    try:
        workout = await db.get(Workout, workout_id)
        if workout is None:
            raise StorageError.not_found(f"Workout with ID {workout_id} not found")
        exercise_id = await _resolve_exercise_id(db, entry)

        order_index = entry.order_index
        if order_index is None:
            last = await db.scalar(
                select(func.max(WorkoutExercise.order_index)).where(
                    WorkoutExercise.workout_id == workout_id
                )
            )
            order_index = 0 if last is None else last + 1
        elif await _position_taken(db, workout_id, order_index):
            raise StorageError.conflict(f"Position {order_index} is already taken")

        row = WorkoutExercise(
            workout_id=workout_id,
            exercise_id=exercise_id,
            order_index=order_index,
            target_sets=entry.target_sets,
            target_reps=entry.target_reps,
            target_weight=entry.target_weight,
        )
        db.add(row)
        workout.updated_at = utcnow()
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to add exercise to workout", str(exc)) from exc
    return row


async def update_workout_exercise(
    db: AsyncSession,
    workout_id: uuid.UUID,
    entry_id: uuid.UUID,
    patch: WorkoutExerciseUpdate | Mapping,
) -> WorkoutExercise:
    patch = _parse(WorkoutExerciseUpdate, patch, "Invalid workout exercise")
    row = await get_workout_exercise(db, entry_id, workout_id)
    if row is None:
        raise StorageError.not_found(f"Workout exercise with ID {entry_id} not found")

    changes = patch.model_dump(exclude_unset=True)
    if changes.get("order_index") is None:
        changes.pop("order_index", None)
    try:
        if "order_index" in changes and await _position_taken(
            db, workout_id, changes["order_index"], exclude=entry_id
        ):
            raise StorageError.conflict(f"Position {changes['order_index']} is already taken")
        for key, value in changes.items():
            setattr(row, key, value)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to update workout exercise", str(exc)) from exc
    return row


async def remove_workout_exercise(
    db: AsyncSession, workout_id: uuid.UUID, entry_id: uuid.UUID
) -> bool:
    """Remove one entry (its sets cascade). False when nothing matched."""
    try:
        result = await db.execute(
            delete(WorkoutExercise)
            .where(
                WorkoutExercise.id == entry_id,
                WorkoutExercise.workout_id == workout_id,
            )
            .returning(WorkoutExercise.id)
        )
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to remove workout exercise", str(exc)) from exc
    return result.scalar_one_or_none() is not None
