import pytest

from repe.client.api import ApiError
from repe.client.offline import OfflineQueue
from repe.client.session import (
    ACTIVE_KEY,
    ActiveWorkout,
    DraftExercise,
    DraftSet,
    WorkoutTracker,
    compute_stats,
    sync_targets,
)
from repe.storage.local_store import LocalStore


class FakeApi:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []
        self.logged = []
        self.sets = []

    async def save_workout(self, payload):
        if self.fail:
            raise ApiError("NETWORK_ERROR", "offline")
        self.saved.append(payload)
        entries = [
            {"id": f"entry-{e['orderIndex']}", "orderIndex": e["orderIndex"]}
            for e in payload["exercises"]
        ]
        return {**payload, "exercises": entries}

    async def add_set(self, entry_id, payload):
        self.sets.append((entry_id, payload))
        return payload

    async def log_session(self, payload):
        self.logged.append(payload)
        return payload


def _tracker(api, online=True, store=None):
    store = store or LocalStore()
    queue = OfflineQueue(sync_targets(api), store=store, online=online)
    return WorkoutTracker(store, queue, user_id="user-1")


def _start(tracker):
    workout = tracker.start_workout({"name": "Leg Day"})
    squat = DraftExercise(name="Squat")
    tracker.add_exercise(squat)
    tracker.add_set(squat.id, {"reps": 5, "weight": 100})
    tracker.add_set(squat.id, DraftSet(reps=5, weight=105))
    return workout, squat


def test_draft_survives_a_new_tracker(tmp_path):
    store = LocalStore(tmp_path / "client.json")
    workout, squat = _start(_tracker(FakeApi(), store=store))

    restored = _tracker(FakeApi(), store=LocalStore(tmp_path / "client.json")).active_workout

    assert restored.id == workout.id
    assert [s.weight for s in restored.exercises[0].sets] == [100, 105]


def test_pause_resume_and_set_edits():
    tracker = _tracker(FakeApi())
    _, squat = _start(tracker)

    assert tracker.pause_workout().status == "paused"
    assert not tracker.is_active
    assert tracker.resume_workout().status == "active"

    first = tracker.active_workout.exercises[0].sets[0]
    tracker.update_set(squat.id, first.id, {"id": first.id, "reps": 6, "weight": 100, "completed": True})
    workout = tracker.remove_set(squat.id, tracker.active_workout.exercises[0].sets[1].id)
    assert [(s.reps, s.completed) for s in workout.exercises[0].sets] == [(6, True)]

    assert tracker.remove_exercise(squat.id).exercises == []


def test_operations_without_active_workout_are_no_ops():
    tracker = _tracker(FakeApi())

    assert tracker.pause_workout() is None
    assert tracker.add_exercise({"name": "Row"}) is None


async def test_finish_saves_workout_and_logs_history():
    api = FakeApi()
    tracker = _tracker(api)
    workout, _ = _start(tracker)

    finished = await tracker.finish_workout()

    assert finished.status == "completed"
    assert api.saved[0]["id"] == workout.id
    assert api.saved[0]["exercises"] == [{"name": "Squat", "orderIndex": 0, "targetSets": 2}]
    assert [(entry, s["reps"], s["weight"]) for entry, s in api.sets] == [
        ("entry-0", 5, 100),
        ("entry-0", 5, 105),
    ]
    assert api.logged[0]["workoutId"] == workout.id
    assert tracker.active_workout is None
    assert [w.id for w in tracker.load_workout_history()] == [workout.id]


async def test_finish_failure_keeps_draft():
    tracker = _tracker(FakeApi(fail=True))
    workout, _ = _start(tracker)

    with pytest.raises(ApiError):
        await tracker.finish_workout()

    assert tracker.active_workout.id == workout.id
    assert tracker.active_workout.status == "active"
    assert tracker.load_workout_history() == []


async def test_finish_offline_queues_both_operations():
    api = FakeApi()
    tracker = _tracker(api, online=False)
    _start(tracker)

    await tracker.finish_workout()

    assert [op.entity for op in tracker.queue.pending_operations] == ["workout", "history"]
    await tracker.queue.go_online()
    assert len(api.saved) == 1 and len(api.logged) == 1
    assert len(api.sets) == 2


def test_templates_are_stored():
    tracker = _tracker(FakeApi())
    tracker.save_template({"name": "Push", "exercises": [{"name": "Bench"}]})

    assert tracker.store.get("workout_templates")[0]["name"] == "Push"
    assert ACTIVE_KEY not in tracker.store


def test_compute_stats():
    workouts = [
        ActiveWorkout(
            name="A",
            duration=1200,
            exercises=[DraftExercise(name="Squat", sets=[DraftSet(reps=5, weight=100), DraftSet(reps=5, weight=100)])],
        ),
        ActiveWorkout(
            name="B",
            duration=1800,
            exercises=[DraftExercise(name="Row", sets=[DraftSet(reps=10, weight=50)])],
        ),
    ]

    stats = compute_stats(workouts)

    assert (stats.total_workouts, stats.total_sets, stats.total_reps) == (2, 3, 20)
    assert stats.total_weight == 250
    assert stats.average_duration == 1500
    assert compute_stats([]).average_duration == 0


async def test_history_entries_cannot_be_changed_through_sync():
    target = sync_targets(FakeApi())["history"]

    with pytest.raises(ApiError) as info:
        await target.delete("entry-1")
    assert info.value.code == "BAD_REQUEST"
