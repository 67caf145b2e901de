"""Exercise endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from repe.core.errors import StorageError
from repe.db.session import get_db
from repe.repositories import exercise as exercise_repo
from repe.schemas.common import Pagination
from repe.schemas.exercise import (
    ExerciseCreate,
    ExerciseListResponse,
    ExerciseRead,
    ExerciseResponse,
)

router = APIRouter()


@router.get("", response_model=ExerciseListResponse)
async def list_exercises(
    db: AsyncSession = Depends(get_db),
    search: str | None = None,
    category: str | None = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Search by name (case-insensitive substring) and/or exact category."""
    page = await exercise_repo.list_exercises(
        db, search=search, category=category, limit=limit, offset=offset
    )
    return ExerciseListResponse(
        data=[ExerciseRead.model_validate(e) for e in page.data],
        pagination=Pagination(
            total=page.total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < page.total,
        ),
    )


@router.post("", response_model=ExerciseResponse, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an exercise; 409 when the name is taken."""
    exercise = await exercise_repo.create_exercise(
        db,
        name=payload.name,
        category=payload.category,
        equipment=payload.equipment,
        notes=payload.notes,
    )
    return ExerciseResponse(data=ExerciseRead.model_validate(exercise))


@router.get("/{exercise_id}", response_model=ExerciseResponse)
async def get_exercise(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    exercise = await exercise_repo.get_exercise_by_id(db, exercise_id)
    if exercise is None:
        raise StorageError.not_found(f"Exercise with ID {exercise_id} not found")
    return ExerciseResponse(data=ExerciseRead.model_validate(exercise))
