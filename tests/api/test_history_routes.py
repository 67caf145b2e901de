import json


def test_logged_session_is_listed_first(client):
    client.post("/api/history", json={"performedAt": "2024-01-01T08:00:00Z", "durationSeconds": 600})
    created = client.post(
        "/api/history", json={"performedAt": "2024-02-01T08:00:00Z", "durationSeconds": 1800}
    )
    assert created.status_code == 201
    entry = created.json()["data"]

    body = client.get("/api/history", params={"limit": 1}).json()

    assert body["success"] is True
    assert [item["id"] for item in body["data"]] == [entry["id"]]
    assert body["data"][0]["durationSeconds"] == 1800
    assert body["hasMore"] is True

    rest = client.get(
        "/api/history", params={"limit": 1, "cursor": json.dumps(body["cursor"])}
    ).json()
    assert rest["data"][0]["durationSeconds"] == 600
    assert rest["hasMore"] is False
    assert "cursor" not in rest


def test_history_filters_and_errors(client):
    client.post("/api/history", json={"performedAt": "2024-01-01T08:00:00Z"})
    client.post("/api/history", json={"performedAt": "2024-03-01T08:00:00Z"})

    body = client.get("/api/history", params={"from": "2024-02-01T00:00:00Z"}).json()
    assert len(body["data"]) == 1

    bad_cursor = client.get("/api/history", params={"cursor": "{}"})
    assert bad_cursor.status_code == 400
    assert bad_cursor.json()["error"]["code"] == "VALIDATION_ERROR"

    negative = client.post("/api/history", json={"durationSeconds": -1})
    assert negative.status_code == 400

    unknown = client.post(
        "/api/history", json={"workoutId": "00000000-0000-0000-0000-000000000001"}
    )
    assert unknown.status_code == 404


def test_backfill_counts(client):
    entries = [
        {"id": "00000000-0000-0000-0000-00000000000a", "performedAt": "2024-01-01T08:00:00Z"},
        {"performedAt": "2024-01-02T08:00:00Z", "durationSeconds": -10},
    ]

    first = client.post("/api/history/backfill", json={"entries": entries}).json()
    second = client.post("/api/history/backfill", json={"entries": entries[:1]}).json()

    assert first == {"success": True, "data": {"inserted": 1, "skipped": 1}}
    assert second["data"] == {"inserted": 0, "skipped": 1}


def test_preferences_round_trip(client):
    assert client.get("/api/preferences").json() == {"success": True, "data": None}

    saved = client.put("/api/preferences", json={"units": "imperial", "preferencesJson": {"restTimer": 90}})
    assert saved.status_code == 200

    client.put("/api/preferences", json={"preferencesJson": {"restTimer": 120}})
    data = client.get("/api/preferences").json()["data"]
    assert data["units"] == "imperial"
    assert data["preferencesJson"] == {"restTimer": 120}

    assert client.get("/api/preferences", params={"userId": "someone"}).json()["data"] is None
    assert client.put("/api/preferences", json={"units": "stones"}).status_code == 400
