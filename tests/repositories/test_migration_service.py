import json
import uuid

from repe.repositories import history as history_repo
from repe.services.migration import (
    EXERCISE_SEED_FILE,
    backfill_exercises,
    backfill_workouts,
    check_database_health,
    check_parity,
    count_json_data,
)
from repe.storage.json_store import WORKOUTS_FILE


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


def _session(**overrides):
    session = {
        "id": str(uuid.uuid4()),
        "userId": "user-1",
        "name": "Morning",
        "startTime": "2024-04-01T07:00:00Z",
        "endTime": "2024-04-01T08:00:00Z",
        "createdAt": "2024-04-01T07:00:00Z",
        "updatedAt": "2024-04-01T08:00:00Z",
    }
    session.update(overrides)
    return session


async def test_backfill_exercises_skips_existing_and_invalid(db, tmp_path):
    _write(
        tmp_path / EXERCISE_SEED_FILE,
        [
            {"name": "Squat", "category": "legs"},
            {"name": "Squat", "category": "legs"},
            {"name": ""},
        ],
    )

    result = await backfill_exercises(db, tmp_path)

    assert (result.inserted, result.skipped) == (1, 2)


async def test_backfill_exercises_without_seed_file(db, tmp_path):
    result = await backfill_exercises(db, tmp_path)
    assert (result.inserted, result.skipped) == (0, 0)


async def test_backfill_workouts_writes_history_for_finished_sessions(db, tmp_path):
    _write(
        tmp_path / WORKOUTS_FILE,
        [
            _session(),
            _session(endTime=None),
            _session(id="legacy-id"),
            {"id": "broken"},
        ],
    )

    result = await backfill_workouts(db, tmp_path)

    assert (result.inserted, result.skipped) == (2, 2)
    page = await history_repo.list_history(db)
    assert len(page.data) == 1
    assert page.data[0].duration_seconds == 3600
    assert page.data[0].workout_name == "Morning"


async def test_parity_after_backfill(db, tmp_path):
    _write(tmp_path / EXERCISE_SEED_FILE, [{"name": "Row", "category": "back"}])
    _write(tmp_path / WORKOUTS_FILE, [_session(), _session(endTime=None)])

    before = await check_parity(db, tmp_path)
    assert not before.is_consistent
    assert before.json == {"exercises": 1, "workouts": 2, "history": 1}

    await backfill_exercises(db, tmp_path)
    await backfill_workouts(db, tmp_path)

    assert (await check_parity(db, tmp_path)).is_consistent


def test_count_json_data_with_no_files(tmp_path):
    assert count_json_data(tmp_path) == {"exercises": 0, "workouts": 0, "history": 0}


async def test_database_health(db):
    assert (await check_database_health(db))["connected"] is True
