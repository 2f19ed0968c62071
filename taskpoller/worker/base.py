"""Worker capability: the user code that executes one task type."""

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

from taskpoller.queue.base import Task, TaskResult

WorkerOutput = Union[Mapping, TaskResult]


class Worker(ABC):
    """
    Executes tasks of a single task type.

    Subclasses set `task_def_name` and implement `execute`. The optional
    `poll_interval`, `domain` and `concurrency` attributes override the
    manager's runner options for this worker only.
    """

    task_def_name: str = ""
    poll_interval: Optional[float] = None
    domain: Optional[str] = None
    concurrency: Optional[int] = None

    @abstractmethod
    async def execute(self, task: Task) -> WorkerOutput:
        """
        Run the task.

        Args:
            task: Leased task

        Returns:
            Mapping with "status" and "outputData", or a TaskResult

        Raises:
            Exception: Any failure; the runner reports it as a FAILED result
        """
        pass

    def overrides(self) -> dict:
        return {"poll_interval": self.poll_interval, "domain": self.domain, "concurrency": self.concurrency}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(task_def_name={self.task_def_name!r})"


class FunctionWorker(Worker):
    """Worker wrapping a plain function or coroutine function.

    Synchronous functions run in a thread so they do not stall other
    runners sharing the event loop.
    """

    def __init__(
        self,
        task_def_name: str,
        func: Callable[[Task], Any],
        poll_interval: Optional[float] = None,
        domain: Optional[str] = None,
        concurrency: Optional[int] = None,
    ):
        if not task_def_name:
            raise ValueError("task_def_name is required")
        self.task_def_name = task_def_name
        self.func = func
        self.poll_interval = poll_interval
        self.domain = domain
        self.concurrency = concurrency

    async def execute(self, task: Task) -> WorkerOutput:
        if inspect.iscoroutinefunction(self.func):
            return await self.func(task)
        result = await asyncio.to_thread(self.func, task)
        if inspect.isawaitable(result):
            result = await result
        return result


def task_worker(task_def_name: str, **overrides: Any) -> Callable[[Callable[[Task], Any]], FunctionWorker]:
    """
    Decorator turning a function into a worker.

    Usage:
        @task_worker("image_resize", concurrency=2)
        async def resize(task):
            ...
            return {"status": "COMPLETED", "outputData": {"url": url}}
    """

    def decorate(func: Callable[[Task], Any]) -> FunctionWorker:
        return FunctionWorker(task_def_name, func, **overrides)

    return decorate
