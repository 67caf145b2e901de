import pytest

from repe.client.offline import PENDING_KEY, OfflineQueue, PendingOperation
from repe.core.enums import OperationType
from repe.storage.local_store import LocalStore


class FakeTarget:
    def __init__(self, failures=0):
        self.calls = []
        self.failures = failures

    async def _record(self, *call):
        self.calls.append(call)
        if self.failures:
            self.failures -= 1
            raise ConnectionError("server unreachable")
        return {"ok": call}

    async def create(self, data):
        return await self._record("create", data)

    async def update(self, item_id, data):
        return await self._record("update", item_id, data)

    async def delete(self, item_id):
        return await self._record("delete", item_id)


def _op(type_, **data):
    return {"type": type_, "entity": "workout", "data": data}


async def test_online_operations_run_immediately():
    target = FakeTarget()
    queue = OfflineQueue({"workout": target})

    result = await queue.queue_operation(_op("create", name="Legs"))

    assert result == {"ok": ("create", {"name": "Legs"})}
    assert queue.pending_operations == []


async def test_offline_operations_persist_and_flush_in_order(tmp_path):
    store = LocalStore(tmp_path / "client.json")
    queue = OfflineQueue({"workout": FakeTarget()}, store=store, online=False)
    await queue.queue_operation(_op("create", name="Legs"))
    await queue.queue_operation(_op("update", id="w1", name="Legs B"))
    await queue.queue_operation(_op("delete", id="w2"))

    # a fresh queue (e.g. after a restart) sees the same pending operations
    target = FakeTarget()
    restarted = OfflineQueue({"workout": target}, store=LocalStore(tmp_path / "client.json"), online=False)
    assert [op.type for op in restarted.pending_operations] == [
        OperationType.CREATE,
        OperationType.UPDATE,
        OperationType.DELETE,
    ]

    failures = await restarted.go_online()

    assert failures == []
    assert [call[0] for call in target.calls] == ["create", "update", "delete"]
    assert target.calls[1][1] == "w1"
    assert PENDING_KEY not in store


async def test_failed_sync_goes_to_errors_and_is_not_requeued():
    target = FakeTarget(failures=1)
    queue = OfflineQueue({"workout": target}, online=False)
    await queue.queue_operation(_op("create", name="First"))
    await queue.queue_operation(_op("create", name="Second"))

    failures = await queue.go_online()

    assert len(failures) == 1
    assert failures[0].operation.data == {"name": "First"}
    assert isinstance(failures[0].error, ConnectionError)
    assert queue.sync_errors == failures
    assert queue.pending_operations == []
    assert len(target.calls) == 2

    queue.clear_sync_errors()
    assert queue.sync_errors == []


async def test_connectivity_callbacks():
    events = []
    queue = OfflineQueue(
        {"workout": FakeTarget()},
        on_online=lambda: events.append("online"),
        on_offline=lambda: events.append("offline"),
    )

    queue.go_offline()
    queue.go_offline()
    await queue.go_online()
    await queue.go_online()

    assert events == ["offline", "online"]


async def test_sync_is_a_no_op_while_offline():
    target = FakeTarget()
    queue = OfflineQueue({"workout": target}, online=False)
    await queue.queue_operation(_op("create", name="Legs"))

    assert await queue.sync() == []
    assert target.calls == []
    assert len(queue.pending_operations) == 1


async def test_retry_operation_succeeds_within_attempts():
    target = FakeTarget(failures=2)
    queue = OfflineQueue({"workout": target})
    op = PendingOperation(type=OperationType.CREATE, entity="workout", data={"name": "Legs"})

    result = await queue.retry_operation(op, attempts=3)

    assert result == {"ok": ("create", {"name": "Legs"})}
    assert len(target.calls) == 3


async def test_retry_operation_raises_last_error():
    target = FakeTarget(failures=5)
    queue = OfflineQueue({"workout": target})

    with pytest.raises(ConnectionError):
        await queue.retry_operation(_op("delete", id="w1"), attempts=2)
    assert len(target.calls) == 2


async def test_unknown_entity_fails_during_sync():
    queue = OfflineQueue({}, online=False)
    await queue.queue_operation({"type": "create", "entity": "history", "data": {}})

    failures = await queue.go_online()

    assert isinstance(failures[0].error, KeyError)


def test_cache_helpers():
    store = LocalStore()
    queue = OfflineQueue({}, store=store)
    queue.cache_data("workouts", [{"id": "w1"}])
    queue.cache_data("library", ["Squat"])
    store.set("unrelated", 1)

    assert queue.get_cached_data("workouts") == [{"id": "w1"}]
    queue.clear_cache("workouts")
    assert queue.get_cached_data("workouts", []) == []

    queue.clear_all_cache()
    assert store.keys() == ["unrelated"]
