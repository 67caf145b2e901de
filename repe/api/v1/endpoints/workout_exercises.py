"""Exercise entries of a workout and their sets."""

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.errors import StorageError
from repe.db.session import get_db
from repe.repositories import set as set_repo
from repe.repositories import workout as workout_repo
from repe.schemas.set import SetCreate, SetListResponse, SetRead, SetResponse
from repe.schemas.workout import (
    WorkoutExerciseCreate,
    WorkoutExerciseRead,
    WorkoutExerciseResponse,
    WorkoutExerciseUpdate,
)

router = APIRouter()


async def _require_entry(db: AsyncSession, workout_id: uuid.UUID, entry_id: uuid.UUID):
    entry = await workout_repo.get_workout_exercise(db, entry_id, workout_id)
    if entry is None:
        raise StorageError.not_found(f"Workout exercise with ID {entry_id} not found")
    return entry


@router.post(
    "/{workout_id}/exercises", response_model=WorkoutExerciseResponse, status_code=201
)
async def add_exercise(
    workout_id: uuid.UUID,
    payload: WorkoutExerciseCreate,
    db: AsyncSession = Depends(get_db),
):
    """Add an exercise (by id or name) to a workout; appended unless orderIndex is given."""
    entry = await workout_repo.add_workout_exercise(db, workout_id, payload)
    return WorkoutExerciseResponse(data=WorkoutExerciseRead.model_validate(entry))


@router.put("/{workout_id}/exercises/{entry_id}", response_model=WorkoutExerciseResponse)
async def update_exercise(
    workout_id: uuid.UUID,
    entry_id: uuid.UUID,
    payload: WorkoutExerciseUpdate,
    db: AsyncSession = Depends(get_db),
):
    entry = await workout_repo.update_workout_exercise(db, workout_id, entry_id, payload)
    return WorkoutExerciseResponse(data=WorkoutExerciseRead.model_validate(entry))


@router.delete("/{workout_id}/exercises/{entry_id}", status_code=204)
async def remove_exercise(
    workout_id: uuid.UUID,
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    if not await workout_repo.remove_workout_exercise(db, workout_id, entry_id):
        raise StorageError.not_found(f"Workout exercise with ID {entry_id} not found")
    return Response(status_code=204)


@router.get("/{workout_id}/exercises/{entry_id}/sets", response_model=SetListResponse)
async def list_sets(
    workout_id: uuid.UUID,
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
):
    await _require_entry(db, workout_id, entry_id)
    sets = await set_repo.list_sets_by_workout(db, entry_id, limit=limit, offset=offset)
    return SetListResponse(data=[SetRead.model_validate(s) for s in sets])


@router.post(
    "/{workout_id}/exercises/{entry_id}/sets", response_model=SetResponse, status_code=201
)
async def add_set(
    workout_id: uuid.UUID,
    entry_id: uuid.UUID,
    payload: SetCreate,
    db: AsyncSession = Depends(get_db),
):
    await _require_entry(db, workout_id, entry_id)
    row = await set_repo.add_set(db, entry_id, **payload.model_dump())
    return SetResponse(data=SetRead.model_validate(row))
