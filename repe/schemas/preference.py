"""User preference schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from repe.core.enums import Units
from repe.schemas.common import CamelModel


class PreferenceUpdate(CamelModel):
    units: Units | None = None
    preferences_json: dict[str, Any] | None = None
    user_id: str | None = None


class PreferenceRead(CamelModel):
    id: UUID
    units: Units
    preferences_json: dict[str, Any] = {}
    user_id: str | None = None
    created_at: datetime
    updated_at: datetime


class PreferenceResponse(CamelModel):
    success: bool = True
    data: PreferenceRead | None = None
