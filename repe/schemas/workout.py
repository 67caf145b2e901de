"""Workout and WorkoutExercise schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field

from repe.core.enums import WorkoutSource
from repe.schemas.common import CamelModel, Pagination
from repe.schemas.exercise import ExerciseRead
from repe.schemas.set import SetRead


class WorkoutExerciseInput(CamelModel):
    """One entry of an upsert payload.

    The exercise is referenced either by id (``id`` or ``exerciseId``) or by
    name, in which case it is looked up case-insensitively or created.
    """

    exercise_id: UUID | None = Field(
        default=None,
        validation_alias=AliasChoices("exerciseId", "exercise_id", "id"),
    )
    name: str | None = None
    category: str | None = None
    order_index: int | None = None
    target_sets: int | None = Field(default=None, ge=0)
    target_reps: int | None = Field(default=None, ge=0)
    target_weight: float | None = Field(default=None, ge=0)


class WorkoutUpsert(CamelModel):
    id: UUID | None = None
    name: str
    exercises: list[WorkoutExerciseInput]
    source: WorkoutSource | None = None
    start_time: datetime | None = None


class WorkoutPatch(CamelModel):
    """Partial update: omitted fields keep their current value."""

    name: str | None = None
    exercises: list[WorkoutExerciseInput] | None = None


class WorkoutExerciseCreate(WorkoutExerciseInput):
    pass


class WorkoutExerciseUpdate(CamelModel):
    order_index: int | None = None
    target_sets: int | None = Field(default=None, ge=0)
    target_reps: int | None = Field(default=None, ge=0)
    target_weight: float | None = Field(default=None, ge=0)


class WorkoutExerciseRead(CamelModel):
    id: UUID
    workout_id: UUID
    exercise_id: UUID
    order_index: int
    target_sets: int | None = None
    target_reps: int | None = None
    target_weight: float | None = None


class WorkoutExerciseDetail(WorkoutExerciseRead):
    exercise: ExerciseRead
    sets: list[SetRead] = []


class WorkoutRead(CamelModel):
    id: UUID
    name: str
    user_id: str | None = None
    source: str
    created_at: datetime
    updated_at: datetime
    exercises: list[WorkoutExerciseRead] = []


class WorkoutDetailRead(WorkoutRead):
    """Workout with entries, their exercises and all sets (also flattened)."""

    exercises: list[WorkoutExerciseDetail] = []
    sets: list[SetRead] = []


class WorkoutResponse(CamelModel):
    success: bool = True
    data: WorkoutDetailRead


class WorkoutListResponse(CamelModel):
    success: bool = True
    data: list[WorkoutRead]
    pagination: Pagination


class WorkoutExerciseResponse(CamelModel):
    success: bool = True
    data: WorkoutExerciseRead
