"""User preferences (units and free-form settings)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from repe.db.session import get_db
from repe.repositories import preference as preference_repo
from repe.schemas.preference import PreferenceRead, PreferenceResponse, PreferenceUpdate

router = APIRouter()


@router.get("", response_model=PreferenceResponse)
async def get_preferences(
    db: AsyncSession = Depends(get_db),
    user_id: str | None = Query(None, alias="userId"),
):
    """The user's settings, or the global row; ``data`` is null before the first save."""
    row = await preference_repo.get_preferences(db, user_id)
    return PreferenceResponse(data=PreferenceRead.model_validate(row) if row else None)


@router.put("", response_model=PreferenceResponse)
async def save_preferences(
    payload: PreferenceUpdate,
    db: AsyncSession = Depends(get_db),
):
    row = await preference_repo.save_preferences(
        db,
        units=payload.units,
        preferences_json=payload.preferences_json,
        user_id=payload.user_id,
    )
    return PreferenceResponse(data=PreferenceRead.model_validate(row))
