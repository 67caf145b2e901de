import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from repe.core.errors import ErrorCode, StorageError
from repe.models import History
from repe.repositories import history as history_repo
from repe.repositories import workout as workout_repo
from repe.schemas.history import HistoryCursor

BASE = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


async def _log_many(db):
    # groups of rows share a performed_at so ordering must fall back to id
    for i in range(11):
        await history_repo.log_session(
            db, performed_at=BASE + timedelta(hours=i // 3), duration_seconds=60 * i
        )


async def test_pages_concatenate_to_full_ordering(db):
    await _log_many(db)
    rows = (await db.execute(select(History))).scalars().all()
    expected = [
        r.id
        for r in sorted(rows, key=lambda r: (r.performed_at, r.id), reverse=True)
    ]

    seen, cursor = [], None
    while True:
        page = await history_repo.list_history(db, cursor=cursor, limit=4)
        seen.extend(item.id for item in page.data)
        if not page.has_more:
            assert page.cursor is None
            break
        cursor = history_repo.encode_cursor(page.cursor)

    assert seen == expected
    assert len(set(seen)) == 11


async def test_limit_is_clamped(db):
    await _log_many(db)

    assert len((await history_repo.list_history(db, limit=0)).data) == 11
    page = await history_repo.list_history(db, limit=1000)
    assert len(page.data) == 11
    assert page.has_more is False


async def test_date_range_filter(db):
    await _log_many(db)

    page = await history_repo.list_history(
        db, from_=BASE + timedelta(hours=1), to=BASE + timedelta(hours=2)
    )

    assert len(page.data) == 6
    assert all(
        BASE + timedelta(hours=1) <= item.performed_at.replace(tzinfo=timezone.utc) <= BASE + timedelta(hours=2)
        for item in page.data
    )


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"performedAt": "2024-01-01T00:00:00Z"}',
        '{"performedAt": "nope", "id": "%s"}' % uuid.uuid4(),
        '{"performedAt": "2024-01-01T00:00:00Z", "id": "%s", "extra": 1}' % uuid.uuid4(),
    ],
)
async def test_malformed_cursor_is_validation_error(db, raw):
    with pytest.raises(StorageError) as info:
        await history_repo.list_history(db, cursor=raw)
    assert info.value.code is ErrorCode.VALIDATION_ERROR


def test_cursor_encoding_is_camel_case_json():
    cursor = HistoryCursor(performed_at=BASE, id=uuid.UUID(int=1))

    encoded = history_repo.encode_cursor(cursor)

    assert '"performedAt"' in encoded
    assert history_repo.decode_cursor(encoded) == cursor


async def test_log_session_includes_workout_name(db):
    workout = await workout_repo.upsert_workout(db, {"name": "Leg Day", "exercises": []})
    await history_repo.log_session(db, workout_id=workout.id, performed_at=BASE, duration_seconds=1800)

    page = await history_repo.list_history(db, limit=1)

    assert page.data[0].workout_name == "Leg Day"
    assert page.data[0].duration_seconds == 1800


async def test_log_session_validation(db):
    with pytest.raises(StorageError) as info:
        await history_repo.log_session(db, duration_seconds=-1)
    assert info.value.code is ErrorCode.VALIDATION_ERROR

    with pytest.raises(StorageError) as info:
        await history_repo.log_session(db, workout_id=uuid.uuid4())
    assert info.value.code is ErrorCode.NOT_FOUND


async def test_backfill_is_idempotent_and_skips_bad_rows(db):
    entry_id = str(uuid.uuid4())
    entries = [
        {"id": entry_id, "performedAt": "2024-01-01T10:00:00Z", "durationSeconds": 900},
        {"performedAt": "2024-01-02T10:00:00Z", "durationSeconds": -5},
        {"performedAt": "not a date"},
        {"performedAt": "2024-01-03T10:00:00Z", "workoutId": str(uuid.uuid4())},
    ]

    first = await history_repo.backfill_history(db, entries)
    assert (first.inserted, first.skipped) == (1, 3)

    again = await history_repo.backfill_history(db, entries[:1])
    assert (again.inserted, again.skipped) == (0, 1)


async def test_backfill_without_ids_does_not_duplicate_on_rerun(db):
    entries = [{"performedAt": "2024-02-01T08:30:00Z", "durationSeconds": 1800}]

    first = await history_repo.backfill_history(db, entries)
    again = await history_repo.backfill_history(db, entries)

    assert (first.inserted, again.inserted, again.skipped) == (1, 0, 1)
    page = await history_repo.list_history(db)
    assert len(page.data) == 1
