import uuid


def _error(response):
    body = response.json()
    assert body["success"] is False
    return body["error"]


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/api/health").json()["status"] == "ok"
    assert client.get("/api/health/ready").json() == {"status": "ok", "database": "connected"}


def test_exercise_crud_and_errors(client):
    created = client.post("/api/exercises", json={"name": "Squat", "category": "legs"})
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    exercise_id = body["data"]["id"]
    assert body["data"]["createdAt"]

    duplicate = client.post("/api/exercises", json={"name": "Squat", "category": "legs"})
    assert duplicate.status_code == 409
    assert _error(duplicate)["code"] == "CONFLICT"

    assert client.get(f"/api/exercises/{exercise_id}").json()["data"]["name"] == "Squat"

    missing = client.get(f"/api/exercises/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert _error(missing)["code"] == "NOT_FOUND"

    malformed = client.get("/api/exercises/not-a-uuid")
    assert malformed.status_code == 400
    assert _error(malformed)["code"] == "VALIDATION_ERROR"


def test_exercise_listing_pagination(client):
    for name in ["Bench Press", "Incline Bench Press", "Squat"]:
        client.post("/api/exercises", json={"name": name, "category": "strength"})

    body = client.get("/api/exercises", params={"search": "bench", "limit": 1}).json()

    assert len(body["data"]) == 1
    assert body["pagination"] == {"total": 2, "limit": 1, "offset": 0, "hasMore": True}
    assert len(client.get("/api/exercise-library").json()["data"]) == 3


def test_invalid_bodies_are_validation_errors(client):
    missing_field = client.post("/api/exercises", json={"name": "Squat"})
    assert missing_field.status_code == 400
    assert _error(missing_field)["details"]

    bad_json = client.post(
        "/api/exercises", content="{not json", headers={"content-type": "application/json"}
    )
    assert bad_json.status_code == 400
    assert _error(bad_json)["code"] == "VALIDATION_ERROR"

    too_big = client.get("/api/exercises", params={"limit": 1000})
    assert too_big.status_code == 400


def test_leg_day_scenario(client):
    created = client.post(
        "/api/workouts",
        json={"name": "Leg Day", "exercises": [{"name": "Squat", "orderIndex": 0}]},
    )
    assert created.status_code == 201
    workout_id = created.json()["data"]["id"]

    detail = client.get(f"/api/workouts/{workout_id}").json()["data"]
    assert [e["exercise"]["name"] for e in detail["exercises"]] == ["Squat"]

    client.post(
        "/api/workouts",
        json={
            "id": workout_id,
            "name": "Leg Day",
            "exercises": [{"name": "Squat", "orderIndex": 0}, {"name": "Lunge", "orderIndex": 1}],
        },
    )

    detail = client.get(f"/api/workouts/{workout_id}").json()["data"]
    assert [e["exercise"]["name"] for e in detail["exercises"]] == ["Squat", "Lunge"]
    assert [e["orderIndex"] for e in detail["exercises"]] == [0, 1]


def test_invalid_start_time_is_rejected(client):
    response = client.post(
        "/api/workouts", json={"name": "Legs", "exercises": [], "startTime": "not-a-date"}
    )
    assert response.status_code == 400
    assert _error(response)["code"] == "VALIDATION_ERROR"


def test_workout_list_put_patch_delete(client):
    workout_id = str(uuid.uuid4())
    replaced = client.put(
        f"/api/workouts/{workout_id}",
        json={"id": str(uuid.uuid4()), "name": "Pull", "exercises": [{"name": "Row"}]},
    )
    assert replaced.status_code == 200
    assert replaced.json()["data"]["id"] == workout_id

    listing = client.get("/api/workouts").json()
    assert listing["pagination"]["total"] == 1
    assert listing["data"][0]["exercises"][0]["orderIndex"] == 0

    patched = client.patch(f"/api/workouts/{workout_id}", json={"name": "Pull A"}).json()["data"]
    assert patched["name"] == "Pull A"
    assert len(patched["exercises"]) == 1

    assert client.patch(f"/api/workouts/{uuid.uuid4()}", json={"name": "x"}).status_code == 404

    assert client.delete(f"/api/workouts/{workout_id}").status_code == 204
    assert client.get(f"/api/workouts/{workout_id}").status_code == 404
    assert client.delete(f"/api/workouts/{workout_id}").status_code == 404


def test_entries_and_sets(client):
    workout_id = client.post("/api/workouts", json={"name": "Push", "exercises": []}).json()["data"]["id"]

    entry = client.post(f"/api/workouts/{workout_id}/exercises", json={"name": "Bench Press"})
    assert entry.status_code == 201
    entry_id = entry.json()["data"]["id"]

    taken = client.post(f"/api/workouts/{workout_id}/exercises", json={"name": "Dip", "orderIndex": 0})
    assert taken.status_code == 409

    created = client.post(f"/api/exercises/{entry_id}/sets", json={"reps": 5, "weight": 100, "rpe": 8})
    assert created.status_code == 201
    set_id = created.json()["data"]["id"]

    out_of_range = client.post(f"/api/exercises/{entry_id}/sets", json={"reps": 5, "rpe": 11})
    assert out_of_range.status_code == 400

    not_finite = client.post(
        f"/api/exercises/{entry_id}/sets",
        content=b'{"reps": 5, "weight": NaN}',
        headers={"Content-Type": "application/json"},
    )
    assert not_finite.status_code == 400

    updated = client.put(f"/api/exercises/{entry_id}/sets/{set_id}", json={"reps": 6})
    assert updated.json()["data"]["reps"] == 6
    assert updated.json()["data"]["weight"] == 100

    nested = client.post(
        f"/api/workouts/{workout_id}/exercises/{entry_id}/sets", json={"reps": 3, "weight": 110}
    )
    assert nested.status_code == 201
    listed = client.get(f"/api/workouts/{workout_id}/exercises/{entry_id}/sets").json()["data"]
    assert len(listed) == 2
    assert len(client.get(f"/api/workouts/{workout_id}").json()["data"]["sets"]) == 2

    wrong_workout = client.get(f"/api/workouts/{uuid.uuid4()}/exercises/{entry_id}/sets")
    assert wrong_workout.status_code == 404

    assert client.delete(f"/api/exercises/{entry_id}/sets/{set_id}").status_code == 204
    assert client.delete(f"/api/exercises/{entry_id}/sets/{set_id}").status_code == 404

    updated_entry = client.put(
        f"/api/workouts/{workout_id}/exercises/{entry_id}", json={"targetSets": 4}
    )
    assert updated_entry.json()["data"]["targetSets"] == 4
    assert client.delete(f"/api/workouts/{workout_id}/exercises/{entry_id}").status_code == 204
    assert client.get(f"/api/exercises/{entry_id}/sets").json()["data"] == []
