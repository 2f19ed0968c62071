"""Tests for the in-memory lease queue."""

import pytest

from taskpoller.queue import InMemoryTaskQueue, TaskResult, create_queue


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
class TestInMemoryTaskQueue:
    """Leasing, completion and lease expiry."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def queue(self, clock):
        return InMemoryTaskQueue(lease_seconds=30, clock=clock)

    async def test_poll_empty(self, queue):
        assert await queue.poll("resize", "worker-1") is None

    async def test_poll_fifo_by_type(self, queue):
        first = queue.add_task("resize", {"n": 1})
        queue.add_task("thumbnail")
        second = queue.add_task("resize", {"n": 2})

        a = await queue.poll("resize", "worker-1")
        b = await queue.poll("resize", "worker-2")

        assert (a.task_id, b.task_id) == (first.task_id, second.task_id)
        assert a.worker_id == "worker-1"
        assert a.poll_count == 1
        assert await queue.poll("resize", "worker-3") is None

    async def test_poll_respects_domain(self, queue):
        queue.add_task("resize", domain="blue")

        assert await queue.poll("resize", "worker-1") is None
        assert await queue.poll("resize", "worker-1", domain="blue") is not None

    async def test_completed_update_removes_task(self, queue):
        task = queue.add_task("resize")
        leased = await queue.poll("resize", "worker-1")

        ack = await queue.update_task(TaskResult(task_id=leased.task_id, status="COMPLETED"))

        assert ack == task.task_id
        assert queue.pending() == []
        assert queue.updates[0].result.status == "COMPLETED"

    async def test_in_progress_update_requeues(self, queue):
        queue.add_task("resize")
        leased = await queue.poll("resize", "worker-1")

        await queue.update_task(TaskResult(task_id=leased.task_id, status="IN_PROGRESS"))
        again = await queue.poll("resize", "worker-2")

        assert again.task_id == leased.task_id
        assert again.poll_count == 2

    async def test_expired_lease_is_reoffered(self, queue, clock):
        queue.add_task("resize")
        leased = await queue.poll("resize", "worker-1")

        clock.now = 29
        assert await queue.poll("resize", "worker-2") is None

        clock.now = 31
        again = await queue.poll("resize", "worker-2")
        assert again.task_id == leased.task_id
        assert again.worker_id == "worker-2"

    async def test_update_unknown_task(self, queue):
        with pytest.raises(KeyError):
            await queue.update_task(TaskResult(task_id="missing", status="COMPLETED"))


class TestCreateQueue:
    """Queue factory."""

    def test_memory(self):
        assert isinstance(create_queue("memory", lease_seconds=5), InMemoryTaskQueue)

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported queue type"):
            create_queue("redis")
