"""User preference repository: one row per user, or one global row."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.enums import Units
from repe.core.errors import StorageError
from repe.db.types import utcnow
from repe.models.user_settings import UserSettings
from repe.schemas.preference import PreferenceUpdate


async def get_preferences(db: AsyncSession, user_id: str | None = None) -> UserSettings | None:
    stmt = select(UserSettings)
    if user_id:
        stmt = stmt.where(UserSettings.user_id == user_id)
    else:
        stmt = stmt.where(UserSettings.user_id.is_(None))
    try:
        result = await db.execute(stmt.order_by(UserSettings.created_at).limit(1))
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to get preferences", str(exc)) from exc
    return result.scalar_one_or_none()


async def save_preferences(
    db: AsyncSession,
    units: Units | str | None = None,
    preferences_json: dict[str, Any] | None = None,
    user_id: str | None = None,
) -> UserSettings:
    """Update the user's row or create it. Omitted fields keep their value."""
    try:
        validated = PreferenceUpdate(
            units=units, preferences_json=preferences_json, user_id=user_id
        )
    except ValidationError as exc:
        raise StorageError.validation(
            "Invalid preferences", exc.errors(include_url=False, include_context=False)
        ) from exc

    row = await get_preferences(db, validated.user_id)
    try:
        if row is None:
            row = UserSettings(
                units=(validated.units or Units.METRIC).value,
                preferences_json=validated.preferences_json or {},
                user_id=validated.user_id,
            )
            db.add(row)
        else:
            if validated.units is not None:
                row.units = validated.units.value
            if validated.preferences_json is not None:
                row.preferences_json = dict(validated.preferences_json)
            row.updated_at = utcnow()
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to save preferences", str(exc)) from exc
    return row
