import json

import httpx
import pytest

from repe.client.api import NETWORK_ERROR, ApiError, RepeClient


def _client(handler):
    transport = httpx.MockTransport(handler)
    return RepeClient(client=httpx.AsyncClient(transport=transport, base_url="http://test"))


async def test_success_envelope_is_unwrapped():
    def handler(request):
        assert request.url.path == "/api/exercises/abc"
        return httpx.Response(200, json={"success": True, "data": {"id": "abc", "name": "Squat"}})

    async with _client(handler) as client:
        assert await client.get_exercise("abc") == {"id": "abc", "name": "Squat"}


async def test_error_envelope_raises_api_error():
    def handler(request):
        return httpx.Response(
            409,
            json={"success": False, "error": {"code": "CONFLICT", "message": "taken"}},
        )

    async with _client(handler) as client:
        with pytest.raises(ApiError) as info:
            await client.create_exercise("Squat", "legs")

    assert (info.value.code, info.value.message, info.value.status) == ("CONFLICT", "taken", 409)
    assert not info.value.is_network_error


async def test_non_json_error_response():
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    async with _client(handler) as client:
        with pytest.raises(ApiError) as info:
            await client.health()
    assert info.value.status == 502


async def test_transport_failure_is_a_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(ApiError) as info:
            await client.list_workouts()
    assert info.value.code == NETWORK_ERROR
    assert info.value.is_network_error


async def test_delete_returns_none_on_204():
    def handler(request):
        assert request.method == "DELETE"
        return httpx.Response(204)

    async with _client(handler) as client:
        assert await client.delete_workout("w1") is None


async def test_iter_history_follows_cursors():
    pages = {
        None: {"success": True, "data": [{"id": "h3"}, {"id": "h2"}], "hasMore": True,
               "cursor": {"performedAt": "2024-01-02T00:00:00Z", "id": "h2"}},
        "h2": {"success": True, "data": [{"id": "h1"}], "hasMore": False},
    }
    seen_params = []

    def handler(request):
        params = dict(request.url.params)
        seen_params.append(params)
        cursor = json.loads(params["cursor"])["id"] if "cursor" in params else None
        return httpx.Response(200, json=pages[cursor])

    async with _client(handler) as client:
        items = [item["id"] async for item in client.iter_history(limit=2)]

    assert items == ["h3", "h2", "h1"]
    assert seen_params[0] == {"limit": "2"}


async def test_query_and_body_are_camel_case():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"success": True, "data": None})

    async with _client(handler) as client:
        assert await client.get_preferences(user_id="u1") is None
        await client.save_preferences(units="imperial", preferences_json={"restTimer": 60})

    assert requests[0].url.params["userId"] == "u1"
    assert json.loads(requests[1].content) == {"units": "imperial", "preferencesJson": {"restTimer": 60}}
