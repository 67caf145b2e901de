"""Workout endpoints: list, upsert, detail, partial update, delete."""

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from repe.core.errors import StorageError
from repe.db.session import get_db
from repe.repositories import workout as workout_repo
from repe.schemas.common import Pagination
from repe.schemas.workout import (
    WorkoutDetailRead,
    WorkoutListResponse,
    WorkoutPatch,
    WorkoutRead,
    WorkoutResponse,
    WorkoutUpsert,
)

router = APIRouter()


@router.get("", response_model=WorkoutListResponse)
async def list_workouts(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Newest first, each with its exercise entries (no sets)."""
    workouts = await workout_repo.list_workouts(db, limit=limit, offset=offset)
    total = await workout_repo.count_workouts(db)
    return WorkoutListResponse(
        data=[WorkoutRead.model_validate(w) for w in workouts],
        pagination=Pagination(
            total=total, limit=limit, offset=offset, has_more=offset + limit < total
        ),
    )


@router.post("", response_model=WorkoutResponse, status_code=201)
async def upsert_workout(
    payload: WorkoutUpsert,
    db: AsyncSession = Depends(get_db),
):
    """Create a workout, or replace it when ``id`` is given."""
    workout = await workout_repo.upsert_workout(db, payload)
    return WorkoutResponse(data=WorkoutDetailRead.model_validate(workout))


@router.get("/{workout_id}", response_model=WorkoutResponse)
async def get_workout(
    workout_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Workout with entries, their exercises and sets."""
    workout = await workout_repo.get_workout(db, workout_id)
    if workout is None:
        raise StorageError.not_found(f"Workout with ID {workout_id} not found")
    return WorkoutResponse(data=WorkoutDetailRead.model_validate(workout))


@router.put("/{workout_id}", response_model=WorkoutResponse)
async def replace_workout(
    workout_id: uuid.UUID,
    payload: WorkoutUpsert,
    db: AsyncSession = Depends(get_db),
):
    """Full upsert; the path id wins over any id in the body."""
    workout = await workout_repo.upsert_workout(
        db, payload.model_copy(update={"id": workout_id})
    )
    return WorkoutResponse(data=WorkoutDetailRead.model_validate(workout))


@router.patch("/{workout_id}", response_model=WorkoutResponse)
async def update_workout(
    workout_id: uuid.UUID,
    payload: WorkoutPatch,
    db: AsyncSession = Depends(get_db),
):
    workout = await workout_repo.patch_workout(db, workout_id, payload)
    return WorkoutResponse(data=WorkoutDetailRead.model_validate(workout))


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a workout, its entries and sets. History rows are kept."""
    if not await workout_repo.delete_workout(db, workout_id):
        raise StorageError.not_found(f"Workout with ID {workout_id} not found")
    return Response(status_code=204)
