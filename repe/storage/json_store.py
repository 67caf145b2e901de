"""Legacy JSON-file storage for users, workout sessions and exercise templates.

Kept for backward compatibility and the database backfill; the API does not
use it. Every write validates the whole collection and replaces the file
atomically.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from repe.core.config import get_settings
from repe.db.types import utcnow
from repe.schemas.legacy import ExerciseTemplate, LegacyUser, LegacyWorkoutSession
from repe.storage.atomic import read_json, write_json_atomic

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

USERS_FILE = "users.json"
WORKOUTS_FILE = "workouts.json"
EXERCISE_TEMPLATES_FILE = "exercise-templates.json"


class JsonStorageError(Exception):
    code = "STORAGE_ERROR"


class StorageValidationError(JsonStorageError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class FileOperationError(JsonStorageError):
    code = "FILE_OPERATION_ERROR"

    def __init__(self, message: str, operation: str, path: Path):
        super().__init__(message)
        self.operation = operation
        self.path = path


class JsonCollection(Generic[T]):
    """A JSON array of ``schema`` records in one file."""

    def __init__(self, path: Path, schema: type[T]):
        self.path = path
        self.schema = schema

    def _validate(self, item: Any, index: int) -> T:
        try:
            return self.schema.model_validate(item)
        except ValidationError as exc:
            raise StorageValidationError(
                f"Validation failed for item at index {index} in {self.path}",
                exc.errors(include_url=False, include_context=False),
            ) from exc

    def read_all(self) -> list[T]:
        try:
            data = read_json(self.path, default=[])
        except (OSError, json.JSONDecodeError) as exc:
            raise FileOperationError(f"Failed to read {self.path}", "read", self.path) from exc
        if not isinstance(data, list):
            raise StorageValidationError(
                f"Expected array in {self.path}, got {type(data).__name__}"
            )
        return [self._validate(item, i) for i, item in enumerate(data)]

    def write_all(self, items: list[T | dict]) -> None:
        validated = [
            self._validate(item.model_dump() if isinstance(item, BaseModel) else item, i)
            for i, item in enumerate(items)
        ]
        payload = [item.model_dump(mode="json", by_alias=True) for item in validated]
        try:
            write_json_atomic(self.path, payload)
        except OSError as exc:
            raise FileOperationError(f"Failed to write {self.path}", "write", self.path) from exc

    def find_by_id(self, item_id: str) -> T | None:
        return next((item for item in self.read_all() if item.id == item_id), None)

    def find_by(self, **attrs) -> list[T]:
        return [
            item
            for item in self.read_all()
            if all(getattr(item, key) == value for key, value in attrs.items())
        ]

    def create(self, data: dict) -> T:
        now = utcnow()
        record = {
            **data,
            "id": str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now,
        }
        item = self._validate(record, -1)
        items = self.read_all()
        items.append(item)
        self.write_all(items)
        return item

    def update(self, item_id: str, updates: dict) -> T | None:
        items = self.read_all()
        for index, item in enumerate(items):
            if item.id == item_id:
                merged = {
                    **item.model_dump(),
                    **{k: v for k, v in updates.items() if k not in ("id", "created_at")},
                    "updated_at": utcnow(),
                }
                items[index] = self._validate(merged, index)
                self.write_all(items)
                return items[index]
        return None

    def delete(self, item_id: str) -> bool:
        items = self.read_all()
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            return False
        self.write_all(remaining)
        return True

    def count(self) -> int:
        return len(self.read_all())


class JsonStore:
    """The three legacy collections under one data directory."""

    def __init__(self, data_dir: str | Path | None = None):
        self.data_dir = Path(data_dir or get_settings().data_dir)
        self.users = JsonCollection(self.data_dir / USERS_FILE, LegacyUser)
        self.workouts = JsonCollection(self.data_dir / WORKOUTS_FILE, LegacyWorkoutSession)
        self.exercise_templates = JsonCollection(
            self.data_dir / EXERCISE_TEMPLATES_FILE, ExerciseTemplate
        )
