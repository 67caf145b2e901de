"""Sets addressed by workout-exercise entry id (``/api/exercises/{entryId}/sets``)."""

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.errors import StorageError
from repe.db.session import get_db
from repe.repositories import set as set_repo
from repe.schemas.set import SetCreate, SetListResponse, SetRead, SetResponse, SetUpdate

router = APIRouter()


@router.get("/{entry_id}/sets", response_model=SetListResponse)
async def list_sets(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
):
    """Sets of the entry, most recent first."""
    sets = await set_repo.list_sets_by_workout(db, entry_id, limit=limit, offset=offset)
    return SetListResponse(data=[SetRead.model_validate(s) for s in sets])


@router.post("/{entry_id}/sets", response_model=SetResponse, status_code=201)
async def add_set(
    entry_id: uuid.UUID,
    payload: SetCreate,
    db: AsyncSession = Depends(get_db),
):
    row = await set_repo.add_set(db, entry_id, **payload.model_dump())
    return SetResponse(data=SetRead.model_validate(row))


@router.put("/{entry_id}/sets/{set_id}", response_model=SetResponse)
async def update_set(
    entry_id: uuid.UUID,
    set_id: uuid.UUID,
    payload: SetUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Partial update; only fields present in the body change."""
    row = await set_repo.update_set(
        db, set_id, workout_exercise_id=entry_id, **payload.model_dump(exclude_unset=True)
    )
    return SetResponse(data=SetRead.model_validate(row))


@router.delete("/{entry_id}/sets/{set_id}", status_code=204)
async def delete_set(
    entry_id: uuid.UUID,
    set_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    if not await set_repo.delete_set(db, set_id, workout_exercise_id=entry_id):
        raise StorageError.not_found(f"Set with ID {set_id} not found")
    return Response(status_code=204)
