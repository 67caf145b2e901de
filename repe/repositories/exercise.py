"""Exercise repository."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.constants import (
    DEFAULT_EXERCISE_CATEGORY,
    DEFAULT_PAGE_SIZE,
    EXERCISE_LIBRARY_LIMIT,
    MAX_EXERCISE_NAME_LENGTH,
)
from repe.core.errors import StorageError
from repe.db.types import dialect_insert, utcnow
from repe.models.exercise import Exercise
from repe.schemas.exercise import ExerciseSeed

logger = logging.getLogger(__name__)


@dataclass
class ExercisePage:
    data: list[Exercise] = field(default_factory=list)
    total: int = 0


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise StorageError.validation("Exercise name is required")
    if len(name) > MAX_EXERCISE_NAME_LENGTH:
        raise StorageError.validation(
            f"Exercise name must be at most {MAX_EXERCISE_NAME_LENGTH} characters"
        )
    return name


def _filters(search: str | None, category: str | None) -> list:
    conditions = []
    if search:
        conditions.append(Exercise.name.icontains(search, autoescape=True))
    if category:
        conditions.append(Exercise.category == category)
    return conditions


async def list_exercises(
    db: AsyncSession,
    search: str | None = None,
    category: str | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> ExercisePage:
    """Filter by name substring (case-insensitive) and exact category.

    ``total`` counts every row matching the filter, ignoring limit/offset.
    """
    conditions = _filters(search, category)
    try:
        total = await db.scalar(
            select(func.count()).select_from(Exercise).where(*conditions)
        )
        result = await db.execute(
            select(Exercise)
            .where(*conditions)
            .order_by(Exercise.name, Exercise.id)
            .limit(max(1, limit))
            .offset(max(0, offset))
        )
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to list exercises", str(exc)) from exc
    return ExercisePage(data=list(result.scalars().all()), total=total or 0)


async def list_exercise_library(
    db: AsyncSession, limit: int = EXERCISE_LIBRARY_LIMIT
) -> list[Exercise]:
    """Every exercise, alphabetical, for pickers."""
    try:
        result = await db.execute(select(Exercise).order_by(Exercise.name).limit(limit))
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to load exercise library", str(exc)) from exc
    return list(result.scalars().all())


async def create_exercise(
    db: AsyncSession,
    name: str,
    category: str,
    equipment: Iterable[str] | None = None,
    notes: str | None = None,
) -> Exercise:
    """Insert a new exercise; a name that already exists raises CONFLICT.

    Single INSERT ... ON CONFLICT DO NOTHING RETURNING: no row back means
    the unique name was taken.
    """
    name = _clean_name(name)
    category = (category or "").strip()
    if not category:
        raise StorageError.validation("Exercise category is required")

    stmt = (
        dialect_insert(db, Exercise)
        .values(
            id=uuid.uuid4(),
            name=name,
            category=category,
            equipment=list(equipment or []),
            notes=notes,
        )
        .on_conflict_do_nothing(index_elements=["name"])
        .returning(Exercise)
    )
    try:
        exercise = (await db.scalars(stmt)).first()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to create exercise", str(exc)) from exc
    if exercise is None:
        raise StorageError.conflict(f'Exercise with name "{name}" already exists')
    logger.info("Created exercise %s (%s)", exercise.id, name)
    return exercise


async def get_exercise_by_id(
    db: AsyncSession, exercise_id: uuid.UUID | str
) -> Exercise | None:
    try:
        exercise_id = uuid.UUID(str(exercise_id))
    except ValueError:
        return None
    try:
        return await db.get(Exercise, exercise_id)
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to get exercise", str(exc)) from exc


async def _find_by_name(db: AsyncSession, name: str) -> Exercise | None:
    result = await db.execute(
        select(Exercise)
        .where(func.lower(Exercise.name) == name.lower())
        .order_by(Exercise.created_at, Exercise.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def find_or_create_exercise(
    db: AsyncSession, name: str, category: str | None = None
) -> Exercise:
    """Case-insensitive lookup by name, creating the exercise when absent.

    A concurrent insert of the same name makes ours a no-op; the row is then
    read back explicitly instead of trusting the conflict path for an id.
    """
    name = _clean_name(name)
    try:
        existing = await _find_by_name(db, name)
        if existing is not None:
            return existing

        stmt = (
            dialect_insert(db, Exercise)
            .values(
                id=uuid.uuid4(),
                name=name,
                category=(category or "").strip() or DEFAULT_EXERCISE_CATEGORY,
                equipment=[],
            )
            .on_conflict_do_nothing(index_elements=["name"])
            .returning(Exercise.id)
        )
        inserted_id = (await db.execute(stmt)).scalar_one_or_none()
        if inserted_id is not None:
            logger.info("Created exercise %s (%s) on demand", inserted_id, name)
            return await db.get(Exercise, inserted_id)

        existing = await _find_by_name(db, name)
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to resolve exercise", str(exc)) from exc
    if existing is None:
        raise StorageError.internal(f'Exercise "{name}" vanished after insert conflict')
    return existing


async def bulk_seed_exercises(
    db: AsyncSession, rows: Iterable[Mapping | ExerciseSeed]
) -> int:
    """Batch insert, skipping names that already exist. Returns rows inserted."""
    values = []
    seen: set[str] = set()
    for row in rows:
        try:
            seed = row if isinstance(row, ExerciseSeed) else ExerciseSeed.model_validate(row)
        except ValidationError as exc:
            raise StorageError.validation(
                "Invalid exercise seed row", exc.errors(include_url=False, include_context=False)
            ) from exc
        name = _clean_name(seed.name)
        if name in seen:
            continue
        seen.add(name)
        now = utcnow()
        values.append(
            {
                "id": uuid.uuid4(),
                "name": name,
                "category": seed.category.strip(),
                "equipment": list(seed.equipment),
                "notes": seed.notes,
                "created_at": now,
                "updated_at": now,
            }
        )
    if not values:
        return 0

    stmt = (
        dialect_insert(db, Exercise)
        .values(values)
        .on_conflict_do_nothing(index_elements=["name"])
        .returning(Exercise.id)
    )
    try:
        inserted = len((await db.execute(stmt)).all())
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to seed exercises", str(exc)) from exc
    logger.info("Seeded %d of %d exercises", inserted, len(values))
    return inserted
