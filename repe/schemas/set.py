"""Set schemas."""

from datetime import datetime
from uuid import UUID

from repe.schemas.common import CamelModel


class SetCreate(CamelModel):
    reps: int
    weight: float | None = None
    rpe: float | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    performed_at: datetime | None = None


class SetUpdate(CamelModel):
    reps: int | None = None
    weight: float | None = None
    rpe: float | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    performed_at: datetime | None = None


class SetRead(CamelModel):
    id: UUID
    workout_exercise_id: UUID
    performed_at: datetime
    reps: int
    weight: float | None = None
    rpe: float | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    created_at: datetime


class SetResponse(CamelModel):
    success: bool = True
    data: SetRead


class SetListResponse(CamelModel):
    success: bool = True
    data: list[SetRead]
