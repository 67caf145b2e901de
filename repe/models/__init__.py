"""ORM models - import all so Base.metadata is complete for migrations."""

from repe.models.exercise import Exercise
from repe.models.history import History
from repe.models.user_settings import UserSettings
from repe.models.workout import Workout, WorkoutExercise, WorkoutSet

__all__ = [
    "Exercise",
    "History",
    "UserSettings",
    "Workout",
    "WorkoutExercise",
    "WorkoutSet",
]
