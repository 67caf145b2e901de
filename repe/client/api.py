"""
Async HTTP client for the Repe API.

Unwraps the ``{success, data}`` envelope and raises ApiError for the
``{success: false, error}`` one.

Usage:
    async with RepeClient("http://localhost:8000") as client:
        page = await client.list_history(limit=10)
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

import httpx

logger = logging.getLogger(__name__)

NETWORK_ERROR = "NETWORK_ERROR"


class ApiError(Exception):
    """A failed API call: server error envelope or transport failure."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details

    @property
    def is_network_error(self) -> bool:
        return self.code == NETWORK_ERROR


def _params(**values) -> dict[str, Any]:
    out = {}
    for key, value in values.items():
        if value is None:
            continue
        out[key] = value.isoformat() if isinstance(value, datetime) else value
    return out


class RepeClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        api_prefix: str = "/api",
        timeout: float | httpx.Timeout = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._prefix = api_prefix.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout if isinstance(timeout, httpx.Timeout) else httpx.Timeout(timeout),
        )

    async def __aenter__(self) -> RepeClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._prefix}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(NETWORK_ERROR, str(exc)) from exc

        if response.status_code == 204:
            return None
        try:
            body = response.json()
        except ValueError as exc:
            logger.error(
                "Non-JSON response from %s %s (%d): %s",
                method, url, response.status_code, response.text[:500],
            )
            raise ApiError(
                "INTERNAL_ERROR", "Invalid JSON response", response.status_code
            ) from exc

        if response.is_error or (isinstance(body, dict) and body.get("success") is False):
            error = body.get("error") if isinstance(body, dict) else None
            error = error if isinstance(error, dict) else {}
            raise ApiError(
                error.get("code", "INTERNAL_ERROR"),
                error.get("message", f"Request failed with status {response.status_code}"),
                response.status_code,
                error.get("details"),
            )
        return body

    async def _data(self, method: str, path: str, **kwargs) -> Any:
        body = await self._request(method, path, **kwargs)
        return body.get("data") if isinstance(body, dict) else body

    # health

    async def health(self) -> dict:
        return await self._request("GET", "/health")

    # exercises

    async def list_exercises(
        self,
        search: str | None = None,
        category: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> dict:
        """``{"data": [...], "pagination": {...}}``"""
        return await self._request(
            "GET",
            "/exercises",
            params=_params(search=search, category=category, limit=limit, offset=offset),
        )

    async def create_exercise(
        self,
        name: str,
        category: str,
        equipment: list[str] | None = None,
        notes: str | None = None,
    ) -> dict:
        payload = {"name": name, "category": category, "equipment": equipment, "notes": notes}
        return await self._data("POST", "/exercises", json=payload)

    async def get_exercise(self, exercise_id: str) -> dict:
        return await self._data("GET", f"/exercises/{exercise_id}")

    async def exercise_library(self) -> list[dict]:
        return await self._data("GET", "/exercise-library")

    # workouts

    async def list_workouts(self, limit: int | None = None, offset: int | None = None) -> dict:
        return await self._request("GET", "/workouts", params=_params(limit=limit, offset=offset))

    async def save_workout(self, payload: dict) -> dict:
        """Create, or replace when ``payload["id"]`` is set."""
        return await self._data("POST", "/workouts", json=payload)

    async def get_workout(self, workout_id: str) -> dict:
        return await self._data("GET", f"/workouts/{workout_id}")

    async def replace_workout(self, workout_id: str, payload: dict) -> dict:
        return await self._data("PUT", f"/workouts/{workout_id}", json=payload)

    async def patch_workout(self, workout_id: str, payload: dict) -> dict:
        return await self._data("PATCH", f"/workouts/{workout_id}", json=payload)

    async def delete_workout(self, workout_id: str) -> None:
        await self._request("DELETE", f"/workouts/{workout_id}")

    async def add_workout_exercise(self, workout_id: str, payload: dict) -> dict:
        return await self._data("POST", f"/workouts/{workout_id}/exercises", json=payload)

    async def update_workout_exercise(self, workout_id: str, entry_id: str, payload: dict) -> dict:
        return await self._data(
            "PUT", f"/workouts/{workout_id}/exercises/{entry_id}", json=payload
        )

    async def remove_workout_exercise(self, workout_id: str, entry_id: str) -> None:
        await self._request("DELETE", f"/workouts/{workout_id}/exercises/{entry_id}")

    # sets

    async def list_sets(self, entry_id: str) -> list[dict]:
        return await self._data("GET", f"/exercises/{entry_id}/sets")

    async def add_set(self, entry_id: str, payload: dict) -> dict:
        return await self._data("POST", f"/exercises/{entry_id}/sets", json=payload)

    async def update_set(self, entry_id: str, set_id: str, patch: dict) -> dict:
        return await self._data("PUT", f"/exercises/{entry_id}/sets/{set_id}", json=patch)

    async def delete_set(self, entry_id: str, set_id: str) -> None:
        await self._request("DELETE", f"/exercises/{entry_id}/sets/{set_id}")

    # history

    async def list_history(
        self,
        limit: int | None = None,
        cursor: dict | str | None = None,
        from_: datetime | None = None,
        to: datetime | None = None,
    ) -> dict:
        """One page: ``{"data", "hasMore", "cursor"?}``. Pass ``cursor`` back verbatim."""
        if isinstance(cursor, dict):
            cursor = json.dumps(cursor)
        params = _params(limit=limit, cursor=cursor, to=to)
        if from_ is not None:
            params["from"] = from_.isoformat()
        return await self._request("GET", "/history", params=params)

    async def iter_history(self, limit: int = 50, **filters) -> AsyncIterator[dict]:
        """Every history entry, following cursors until ``hasMore`` is false."""
        cursor = None
        while True:
            page = await self.list_history(limit=limit, cursor=cursor, **filters)
            for item in page["data"]:
                yield item
            if not page.get("hasMore"):
                return
            cursor = page["cursor"]

    async def log_session(self, payload: dict) -> dict:
        return await self._data("POST", "/history", json=payload)

    async def backfill_history(self, entries: list[dict]) -> dict:
        return await self._data("POST", "/history/backfill", json={"entries": entries})

    # preferences

    async def get_preferences(self, user_id: str | None = None) -> dict | None:
        return await self._data("GET", "/preferences", params=_params(userId=user_id))

    async def save_preferences(
        self,
        units: str | None = None,
        preferences_json: dict | None = None,
        user_id: str | None = None,
    ) -> dict:
        payload = _params(units=units, preferencesJson=preferences_json, userId=user_id)
        return await self._data("PUT", "/preferences", json=payload)
