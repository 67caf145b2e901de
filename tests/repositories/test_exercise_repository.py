import uuid

import pytest

from repe.core.errors import ErrorCode, StorageError
from repe.repositories import exercise as exercise_repo


async def _seed(db):
    for name, category in [
        ("Bench Press", "chest"),
        ("Incline Bench Press", "chest"),
        ("Bench Dip", "arms"),
        ("Back Squat", "legs"),
    ]:
        await exercise_repo.create_exercise(db, name=name, category=category)


async def test_list_filters_by_search_and_category(db):
    await _seed(db)

    page = await exercise_repo.list_exercises(db, search="BENCH", category="chest")

    assert {e.name for e in page.data} == {"Bench Press", "Incline Bench Press"}
    assert page.total == 2


async def test_total_ignores_limit_and_offset(db):
    await _seed(db)

    page = await exercise_repo.list_exercises(db, search="bench", limit=1, offset=1)

    assert len(page.data) == 1
    assert page.total == 3


async def test_search_treats_wildcards_literally(db):
    await _seed(db)

    page = await exercise_repo.list_exercises(db, search="%")

    assert page.total == 0


async def test_create_then_get_by_id(db):
    created = await exercise_repo.create_exercise(
        db, name="  Deadlift ", category="back", equipment=["barbell"]
    )

    fetched = await exercise_repo.get_exercise_by_id(db, created.id)
    assert fetched.name == "Deadlift"
    assert fetched.equipment == ["barbell"]


async def test_duplicate_name_is_a_conflict(db):
    await exercise_repo.create_exercise(db, name="Deadlift", category="back")

    with pytest.raises(StorageError) as info:
        await exercise_repo.create_exercise(db, name="Deadlift", category="legs")
    assert info.value.code is ErrorCode.CONFLICT


async def test_blank_name_is_rejected(db):
    with pytest.raises(StorageError) as info:
        await exercise_repo.create_exercise(db, name="   ", category="back")
    assert info.value.code is ErrorCode.VALIDATION_ERROR


async def test_get_by_id_unknown_or_malformed(db):
    assert await exercise_repo.get_exercise_by_id(db, uuid.uuid4()) is None
    assert await exercise_repo.get_exercise_by_id(db, "not-a-uuid") is None


async def test_find_or_create_is_case_insensitive(db):
    created = await exercise_repo.create_exercise(db, name="Pull Up", category="back")

    found = await exercise_repo.find_or_create_exercise(db, "pull up")
    assert found.id == created.id

    new = await exercise_repo.find_or_create_exercise(db, "Chin Up")
    assert new.category == "other"
    assert (await exercise_repo.find_or_create_exercise(db, "CHIN UP")).id == new.id


async def test_bulk_seed_skips_existing_names(db):
    await exercise_repo.create_exercise(db, name="Plank", category="core")
    rows = [
        {"name": "Plank", "category": "core"},
        {"name": "Crunch", "category": "core"},
        {"name": "Crunch", "category": "core"},
        {"name": "Burpee", "category": "cardio", "equipment": []},
    ]

    assert await exercise_repo.bulk_seed_exercises(db, rows) == 2
    assert await exercise_repo.bulk_seed_exercises(db, rows) == 0
    library = await exercise_repo.list_exercise_library(db)
    assert [e.name for e in library] == ["Burpee", "Crunch", "Plank"]


async def test_bulk_seed_rejects_invalid_rows(db):
    with pytest.raises(StorageError) as info:
        await exercise_repo.bulk_seed_exercises(db, [{"name": "No category"}])
    assert info.value.code is ErrorCode.VALIDATION_ERROR
