"""JSON-file key/value store: the server-side stand-in for browser localStorage.

Every operation re-reads the file, so two stores on the same path see each
other's writes; concurrent writers are last-writer-wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from repe.storage.atomic import read_json, write_json_atomic

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(self, path: str | Path | None = None):
        # path=None keeps everything in memory (tests, ephemeral clients)
        self.path = Path(path) if path is not None else None
        self._memory: dict[str, Any] = {}

    def _load(self) -> dict[str, Any]:
        if self.path is None:
            return dict(self._memory)
        try:
            data = read_json(self.path, default={})
        except json.JSONDecodeError:
            logger.warning("Local store %s is corrupt; starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        if self.path is None:
            self._memory = dict(data)
        else:
            write_json_atomic(self.path, data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._load() if k.startswith(prefix)]

    def clear(self) -> None:
        self._save({})

    def __contains__(self, key: str) -> bool:
        return key in self._load()
