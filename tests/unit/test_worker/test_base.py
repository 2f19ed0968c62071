"""Tests for worker adapters."""

import threading

import pytest

from taskpoller.queue import Task
from taskpoller.worker import FunctionWorker, Worker, task_worker


@pytest.mark.asyncio
class TestFunctionWorker:
    """Function and decorator based workers."""

    async def test_async_function(self):
        async def handle(task):
            return {"status": "COMPLETED", "outputData": {"id": task.task_id}}

        worker = FunctionWorker("resize", handle)

        assert await worker.execute(Task(task_id="t1")) == {"status": "COMPLETED", "outputData": {"id": "t1"}}

    async def test_sync_function_runs_off_loop_thread(self):
        loop_thread = threading.get_ident()
        seen = []

        def handle(task):
            seen.append(threading.get_ident())
            return {"status": "COMPLETED"}

        await FunctionWorker("resize", handle).execute(Task(task_id="t1"))

        assert seen and seen[0] != loop_thread

    async def test_errors_propagate(self):
        def handle(task):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await FunctionWorker("resize", handle).execute(Task(task_id="t1"))


class TestTaskWorkerDecorator:
    """Decorator and argument checks."""

    def test_decorator(self):
        @task_worker("resize", concurrency=4, domain="blue")
        async def resize(task):
            return {"status": "COMPLETED"}

        assert isinstance(resize, Worker)
        assert resize.task_def_name == "resize"
        assert resize.overrides() == {"poll_interval": None, "domain": "blue", "concurrency": 4}

    def test_task_def_name_required(self):
        with pytest.raises(ValueError):
            FunctionWorker("", lambda task: None)


class TestWorkerSubclass:
    """Class based workers."""

    def test_defaults(self):
        class Resize(Worker):
            task_def_name = "resize"

            async def execute(self, task):
                return {"status": "COMPLETED"}

        worker = Resize()

        assert worker.overrides() == {"poll_interval": None, "domain": None, "concurrency": None}
        assert repr(worker) == "Resize(task_def_name='resize')"
