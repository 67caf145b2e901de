"""API v1 router aggregation."""

from fastapi import APIRouter

from repe.api.v1.endpoints import (
    exercise_library,
    exercises,
    health,
    history,
    preferences,
    sets,
    workout_exercises,
    workouts,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(sets.router, prefix="/exercises", tags=["sets"])
api_router.include_router(exercise_library.router, prefix="/exercise-library", tags=["exercises"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(workout_exercises.router, prefix="/workouts", tags=["workout-exercises"])
api_router.include_router(history.router, prefix="/history", tags=["history"])
api_router.include_router(preferences.router, prefix="/preferences", tags=["preferences"])
