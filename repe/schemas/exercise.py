"""Exercise schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from repe.core.constants import MAX_EXERCISE_NAME_LENGTH
from repe.schemas.common import CamelModel, Pagination


class ExerciseCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=MAX_EXERCISE_NAME_LENGTH)
    category: str = Field(..., min_length=1)
    equipment: list[str] | None = None
    notes: str | None = None


class ExerciseRead(CamelModel):
    id: UUID
    name: str
    category: str
    equipment: list[str] = []
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class ExerciseSeed(CamelModel):
    """One row of the seed file / legacy exercise library."""

    name: str = Field(..., min_length=1, max_length=MAX_EXERCISE_NAME_LENGTH)
    category: str = Field(..., min_length=1)
    equipment: list[str] = []
    notes: str | None = None


class ExerciseResponse(CamelModel):
    success: bool = True
    data: ExerciseRead


class ExerciseListResponse(CamelModel):
    success: bool = True
    data: list[ExerciseRead]
    pagination: Pagination
