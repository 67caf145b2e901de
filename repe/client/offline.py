"""Offline mutation queue.

While offline, create/update/delete operations are queued and persisted to
the local store so they survive restarts. Going back online flushes them in
order; an operation that fails during the flush goes to ``sync_errors`` and
is not re-queued. Retrying is an explicit call to ``retry_operation``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import BaseModel, Field, ValidationError

from repe.core.enums import OperationType
from repe.db.types import utcnow
from repe.storage.local_store import LocalStore

logger = logging.getLogger(__name__)

PENDING_KEY = "offline_pending_operations"
CACHE_PREFIX = "offline_cache_"
DEFAULT_RETRY_ATTEMPTS = 3


class SyncTarget(Protocol):
    async def create(self, data: dict) -> Any: ...

    async def update(self, item_id: str, data: dict) -> Any: ...

    async def delete(self, item_id: str) -> Any: ...


class PendingOperation(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: OperationType
    entity: str
    data: dict[str, Any] = {}
    queued_at: str = Field(default_factory=lambda: utcnow().isoformat())


@dataclass
class SyncFailure:
    operation: PendingOperation
    error: Exception


class OfflineQueue:
    def __init__(
        self,
        targets: Mapping[str, SyncTarget],
        store: LocalStore | None = None,
        online: bool = True,
        on_online: Callable[[], None] | None = None,
        on_offline: Callable[[], None] | None = None,
    ):
        self.targets = dict(targets)
        self.store = store or LocalStore()
        self.is_online = online
        self.on_online = on_online
        self.on_offline = on_offline
        self.sync_errors: list[SyncFailure] = []
        self.is_syncing = False

    @property
    def is_offline(self) -> bool:
        return not self.is_online

    @property
    def pending_operations(self) -> list[PendingOperation]:
        ops = []
        for raw in self.store.get(PENDING_KEY, []):
            try:
                ops.append(PendingOperation.model_validate(raw))
            except ValidationError:
                logger.warning("Dropping unreadable queued operation: %r", raw)
        return ops

    def _save_pending(self, ops: list[PendingOperation]) -> None:
        if ops:
            self.store.set(PENDING_KEY, [op.model_dump(mode="json") for op in ops])
        else:
            self.store.remove(PENDING_KEY)

    # connectivity

    def go_offline(self) -> None:
        if self.is_offline:
            return
        self.is_online = False
        logger.info("Offline; queueing mutations")
        if self.on_offline:
            self.on_offline()

    async def go_online(self) -> list[SyncFailure]:
        """Mark online and flush the queue. Returns the failures of this flush."""
        was_offline = self.is_offline
        self.is_online = True
        if was_offline and self.on_online:
            self.on_online()
        return await self.sync()

    # operations

    async def _execute(self, op: PendingOperation) -> Any:
        target = self.targets.get(op.entity)
        if target is None:
            raise KeyError(f"No sync target for entity {op.entity!r}")
        if op.type is OperationType.CREATE:
            return await target.create(op.data)
        item_id = str(op.data.get("id", ""))
        if op.type is OperationType.UPDATE:
            return await target.update(item_id, op.data)
        return await target.delete(item_id)

    async def queue_operation(
        self, operation: PendingOperation | Mapping
    ) -> PendingOperation | Any:
        """Run now when online; otherwise persist for the next flush.

        Online failures propagate to the caller and nothing is queued.
        """
        op = (
            operation
            if isinstance(operation, PendingOperation)
            else PendingOperation.model_validate(operation)
        )
        if self.is_online:
            return await self._execute(op)
        pending = self.pending_operations
        pending.append(op)
        self._save_pending(pending)
        logger.debug("Queued %s %s (%d pending)", op.type.value, op.entity, len(pending))
        return op

    async def sync(self) -> list[SyncFailure]:
        """Flush queued operations in order; failures are collected, not re-queued."""
        if self.is_syncing or self.is_offline:
            return []
        self.is_syncing = True
        failures: list[SyncFailure] = []
        try:
            for op in self.pending_operations:
                try:
                    await self._execute(op)
                except Exception as exc:
                    logger.warning("Sync of %s %s failed: %s", op.type.value, op.entity, exc)
                    failures.append(SyncFailure(op, exc))
                # done either way; failures live in sync_errors only
                self._save_pending([p for p in self.pending_operations if p.id != op.id])
        finally:
            self.is_syncing = False
        self.sync_errors.extend(failures)
        if failures:
            logger.info("Sync finished with %d failures", len(failures))
        return failures

    async def retry_operation(
        self, operation: PendingOperation | Mapping, attempts: int = DEFAULT_RETRY_ATTEMPTS
    ) -> Any:
        """Manual retry: run the operation up to ``attempts`` times, raising the last error."""
        op = (
            operation
            if isinstance(operation, PendingOperation)
            else PendingOperation.model_validate(operation)
        )
        last_error: Exception | None = None
        for attempt in range(1, max(1, attempts) + 1):
            try:
                result = await self._execute(op)
            except Exception as exc:
                logger.warning("Retry %d/%d of %s failed: %s", attempt, attempts, op.entity, exc)
                last_error = exc
                continue
            self.sync_errors = [f for f in self.sync_errors if f.operation.id != op.id]
            return result
        raise last_error

    def clear_sync_errors(self) -> None:
        self.sync_errors = []

    # read cache

    def cache_data(self, key: str, data: Any) -> None:
        self.store.set(f"{CACHE_PREFIX}{key}", data)

    def get_cached_data(self, key: str, default: Any = None) -> Any:
        return self.store.get(f"{CACHE_PREFIX}{key}", default)

    def clear_cache(self, key: str) -> None:
        self.store.remove(f"{CACHE_PREFIX}{key}")

    def clear_all_cache(self) -> None:
        for key in self.store.keys(CACHE_PREFIX):
            self.store.remove(key)
