"""Full exercise library for pickers."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repe.db.session import get_db
from repe.repositories import exercise as exercise_repo
from repe.schemas.exercise import ExerciseRead

router = APIRouter()


@router.get("")
async def exercise_library(db: AsyncSession = Depends(get_db)):
    exercises = await exercise_repo.list_exercise_library(db)
    return {
        "success": True,
        "data": [
            ExerciseRead.model_validate(e).model_dump(mode="json", by_alias=True)
            for e in exercises
        ],
    }
