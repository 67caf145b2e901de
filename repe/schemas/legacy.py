"""Shapes of the legacy JSON data files (users, workout sessions, exercise templates)."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from repe.schemas.common import CamelModel

WeightUnit = Literal["kg", "lbs"]
SetType = Literal["working", "warmup", "dropset", "failure", "rest-pause"]
ExerciseCategory = Literal["strength", "cardio", "flexibility", "other"]


class LegacyUserPreferences(CamelModel):
    default_weight_unit: WeightUnit = "kg"
    default_intensity_scale: Literal[1, 5, 10] = 5
    theme: Literal["dark"] = "dark"


class LegacyUser(CamelModel):
    id: str = Field(..., min_length=1)
    name: str | None = None
    preferences: LegacyUserPreferences = Field(default_factory=LegacyUserPreferences)
    created_at: datetime
    updated_at: datetime


class LegacySet(CamelModel):
    id: str = Field(..., min_length=1)
    type: SetType = "working"
    reps: int | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    duration: int | None = Field(default=None, gt=0)
    distance: float | None = Field(default=None, gt=0)
    intensity: int | None = Field(default=None, ge=1, le=10)
    notes: str | None = None
    rest_time: int | None = Field(default=None, ge=0)
    timestamp: datetime


class LegacyExercise(CamelModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: ExerciseCategory = "other"
    muscle_groups: list[str] = []
    sets: list[LegacySet] = []


class LegacyWorkoutSession(CamelModel):
    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    name: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    exercises: list[LegacyExercise] = []
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class ExerciseTemplate(CamelModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    default_weight_unit: WeightUnit = "kg"
    created_at: datetime
    updated_at: datetime
