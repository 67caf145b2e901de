"""Active workout tracking on the client.

The in-progress workout is a draft kept in the local store, so it survives
restarts. Finishing it saves the workout and logs a history entry through
the offline queue (immediately when online).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from repe.client.api import ApiError, RepeClient
from repe.client.offline import OfflineQueue, PendingOperation
from repe.core.enums import OperationType
from repe.db.types import utcnow
from repe.schemas.common import CamelModel
from repe.storage.local_store import LocalStore

logger = logging.getLogger(__name__)

ACTIVE_KEY = "active_workout"
HISTORY_KEY = "workout_history"
TEMPLATES_KEY = "workout_templates"


def _new_id() -> str:
    return str(uuid.uuid4())


class DraftSet(CamelModel):
    id: str = Field(default_factory=_new_id)
    reps: int = 0
    weight: float = 0
    rpe: float | None = None
    completed: bool = False
    rest_time: int = 0


class DraftExercise(CamelModel):
    id: str = Field(default_factory=_new_id)
    name: str
    sets: list[DraftSet] = []
    rest_time: int = 0


class WorkoutTemplate(CamelModel):
    name: str
    exercises: list[DraftExercise] = []


class ActiveWorkout(CamelModel):
    id: str = Field(default_factory=_new_id)
    user_id: str | None = None
    name: str
    exercises: list[DraftExercise] = []
    start_time: datetime = Field(default_factory=utcnow)
    end_time: datetime | None = None
    status: Literal["active", "paused", "completed"] = "active"
    duration: int = 0
    notes: str = ""


@dataclass
class WorkoutStats:
    total_workouts: int = 0
    total_sets: int = 0
    total_reps: int = 0
    total_weight: float = 0
    average_duration: float = 0


def compute_stats(workouts: list[ActiveWorkout]) -> WorkoutStats:
    """Totals across finished workouts; weight is summed per set, not per rep."""
    sets = [s for w in workouts for e in w.exercises for s in e.sets]
    return WorkoutStats(
        total_workouts=len(workouts),
        total_sets=len(sets),
        total_reps=sum(s.reps for s in sets),
        total_weight=sum(s.weight for s in sets),
        average_duration=(
            sum(w.duration for w in workouts) / len(workouts) if workouts else 0
        ),
    )


class WorkoutSyncTarget:
    """Routes queued workout operations to the API."""

    def __init__(self, client: RepeClient):
        self.client = client

    async def create(self, data: dict) -> Any:
        """Save the workout, then post the logged sets to the entries it returns."""
        exercises = [dict(e) for e in data.get("exercises", [])]
        logged = {e["orderIndex"]: e.pop("sets", []) for e in exercises}
        detail = await self.client.save_workout({**data, "exercises": exercises})
        for entry in detail.get("exercises", []):
            for draft in logged.get(entry["orderIndex"], []):
                await self.client.add_set(entry["id"], draft)
        return detail

    async def update(self, item_id: str, data: dict) -> Any:
        return await self.client.replace_workout(item_id, data)

    async def delete(self, item_id: str) -> Any:
        return await self.client.delete_workout(item_id)


class HistorySyncTarget:
    def __init__(self, client: RepeClient):
        self.client = client

    async def create(self, data: dict) -> Any:
        return await self.client.log_session(data)

    async def update(self, item_id: str, data: dict) -> Any:
        raise ApiError("BAD_REQUEST", "History entries are append-only")

    async def delete(self, item_id: str) -> Any:
        raise ApiError("BAD_REQUEST", "History entries are append-only")


def sync_targets(client: RepeClient) -> dict:
    return {"workout": WorkoutSyncTarget(client), "history": HistorySyncTarget(client)}


class WorkoutTracker:
    def __init__(self, store: LocalStore, queue: OfflineQueue, user_id: str | None = None):
        self.store = store
        self.queue = queue
        self.user_id = user_id
        self.current_exercise: DraftExercise | None = None
        self.workout_history: list[ActiveWorkout] = []

    # draft persistence

    @property
    def active_workout(self) -> ActiveWorkout | None:
        raw = self.store.get(ACTIVE_KEY)
        return ActiveWorkout.model_validate(raw) if raw else None

    def _save(self, workout: ActiveWorkout | None) -> None:
        if workout is None:
            self.store.remove(ACTIVE_KEY)
        else:
            self.store.set(ACTIVE_KEY, workout.model_dump(mode="json", by_alias=True))

    @property
    def is_active(self) -> bool:
        workout = self.active_workout
        return workout is not None and workout.status == "active"

    def _require_active(self) -> ActiveWorkout | None:
        workout = self.active_workout
        if workout is None:
            logger.debug("No active workout")
        return workout

    # workout lifecycle

    def start_workout(self, template: WorkoutTemplate | dict) -> ActiveWorkout:
        template = WorkoutTemplate.model_validate(template)
        workout = ActiveWorkout(
            user_id=self.user_id,
            name=template.name,
            exercises=template.exercises,
        )
        self._save(workout)
        logger.info("Started workout %s (%s)", workout.id, workout.name)
        return workout

    def _set_status(self, status: str) -> ActiveWorkout | None:
        workout = self._require_active()
        if workout is None:
            return None
        workout.status = status
        self._save(workout)
        return workout

    def pause_workout(self) -> ActiveWorkout | None:
        return self._set_status("paused")

    def resume_workout(self) -> ActiveWorkout | None:
        return self._set_status("active")

    def _upsert_payload(self, workout: ActiveWorkout) -> dict:
        return {
            "id": workout.id,
            "name": workout.name,
            "startTime": workout.start_time.isoformat(),
            "exercises": [
                {
                    "name": exercise.name,
                    "orderIndex": index,
                    "targetSets": len(exercise.sets) or None,
                    "sets": [
                        {
                            "reps": draft.reps,
                            "weight": draft.weight,
                            "rpe": draft.rpe,
                            "restSeconds": draft.rest_time or None,
                        }
                        for draft in exercise.sets
                    ],
                }
                for index, exercise in enumerate(workout.exercises)
            ],
        }

    async def finish_workout(self) -> ActiveWorkout | None:
        """Save the workout and log a history entry, then clear the draft.

        On failure the draft is left untouched and the error propagates.
        """
        workout = self._require_active()
        if workout is None:
            return None
        end_time = utcnow()
        duration = max(0, int((end_time - workout.start_time).total_seconds()))

        try:
            await self.queue.queue_operation(
                PendingOperation(
                    type=OperationType.CREATE,
                    entity="workout",
                    data=self._upsert_payload(workout),
                )
            )
            await self.queue.queue_operation(
                PendingOperation(
                    type=OperationType.CREATE,
                    entity="history",
                    data={
                        "workoutId": workout.id,
                        "performedAt": workout.start_time.isoformat(),
                        "durationSeconds": duration,
                        "notes": workout.notes or None,
                    },
                )
            )
        except Exception:
            logger.exception("Failed to finish workout %s", workout.id)
            raise

        finished = workout.model_copy(
            update={"status": "completed", "end_time": end_time, "duration": duration}
        )
        history = self.store.get(HISTORY_KEY, [])
        history.append(finished.model_dump(mode="json", by_alias=True))
        self.store.set(HISTORY_KEY, history)
        self._save(None)
        self.current_exercise = None
        logger.info("Finished workout %s (%ds)", workout.id, duration)
        return finished

    # exercises and sets

    def _update_exercises(self, change) -> ActiveWorkout | None:
        workout = self._require_active()
        if workout is None:
            return None
        workout.exercises = change(workout.exercises)
        self._save(workout)
        return workout

    def add_exercise(self, exercise: DraftExercise | dict) -> ActiveWorkout | None:
        exercise = DraftExercise.model_validate(exercise)
        return self._update_exercises(lambda exercises: [*exercises, exercise])

    def remove_exercise(self, exercise_id: str) -> ActiveWorkout | None:
        return self._update_exercises(
            lambda exercises: [e for e in exercises if e.id != exercise_id]
        )

    def select_exercise(self, exercise: DraftExercise | dict) -> None:
        self.current_exercise = DraftExercise.model_validate(exercise)

    def _update_sets(self, exercise_id: str, change) -> ActiveWorkout | None:
        def apply(exercises):
            for exercise in exercises:
                if exercise.id == exercise_id:
                    exercise.sets = change(exercise.sets)
            return exercises

        return self._update_exercises(apply)

    def add_set(self, exercise_id: str, draft: DraftSet | dict) -> ActiveWorkout | None:
        draft = DraftSet.model_validate(draft)
        return self._update_sets(exercise_id, lambda sets: [*sets, draft])

    def update_set(
        self, exercise_id: str, set_id: str, draft: DraftSet | dict
    ) -> ActiveWorkout | None:
        draft = DraftSet.model_validate(draft)
        return self._update_sets(
            exercise_id, lambda sets: [draft if s.id == set_id else s for s in sets]
        )

    def remove_set(self, exercise_id: str, set_id: str) -> ActiveWorkout | None:
        return self._update_sets(
            exercise_id, lambda sets: [s for s in sets if s.id != set_id]
        )

    # templates and history

    def save_template(self, template: WorkoutTemplate | dict) -> WorkoutTemplate:
        template = WorkoutTemplate.model_validate(template)
        templates = self.store.get(TEMPLATES_KEY, [])
        templates.append(template.model_dump(mode="json", by_alias=True))
        self.store.set(TEMPLATES_KEY, templates)
        return template

    def load_workout_history(self) -> list[ActiveWorkout]:
        self.workout_history = [
            ActiveWorkout.model_validate(raw) for raw in self.store.get(HISTORY_KEY, [])
        ]
        return self.workout_history

    @property
    def stats(self) -> WorkoutStats:
        return compute_stats(self.workout_history)
