"""Poll -> execute -> update loop for a single worker."""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from taskpoller.config import RunnerOptions
from taskpoller.core.constants import MAX_UPDATE_RETRIES, retry_delay_seconds
from taskpoller.core.errors import RunnerAlreadyStartedError
from taskpoller.core.failures import Failure, log_failure
from taskpoller.queue.base import Task, TaskQueueService, TaskResult

from .base import Worker

TaskErrorHandler = Callable[..., None]


def noop_error_handler(error: Any, task: Optional[Task] = None) -> None:
    return None


class RunnerState(str, Enum):
    """Runner lifecycle states."""

    STOPPED = "stopped"
    POLLING = "polling"


class TaskRunner:
    """
    Polls the queue for one worker's tasks and executes them.

    Polling leases a task off the queue, so a runner only asks for more work
    once the previous task has been executed and its result delivered. At
    most one task is in flight per runner; scale out with more runners
    rather than splitting polling and execution into separate pools.

    Suspension points per iteration: poll, execute, update, sleep. Stopping
    is cooperative and takes effect before the next iteration. No timeout is
    applied to the worker; a hung worker holds its runner until the task's
    lease expires on the server.
    """

    def __init__(
        self,
        worker: Worker,
        client: TaskQueueService,
        options: Optional[RunnerOptions] = None,
        logger: Optional[logging.Logger] = None,
        on_error: Optional[TaskErrorHandler] = None,
    ):
        """
        Initialize runner.

        Args:
            worker: Worker that executes tasks
            client: Queue service to poll and update
            options: Poll interval, domain and worker id
            logger: Logger to report through (default: module logger)
            on_error: Called as on_error(error, task) at every failure site
        """
        self.worker = worker
        self.client = client
        self.options = options or RunnerOptions()
        self.logger = logger or logging.getLogger(__name__)
        self.error_handler = on_error or noop_error_handler
        self._state = RunnerState.STOPPED
        self._generation = 0
        self._loop_task: Optional["asyncio.Task[None]"] = None

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def is_polling(self) -> bool:
        return self._state is RunnerState.POLLING

    def start_polling(self) -> "asyncio.Task[None]":
        """
        Start polling for work on the running event loop.

        Returns:
            The asyncio task running the poll loop

        Raises:
            RunnerAlreadyStartedError: If this runner is already polling
        """
        if self.is_polling:
            raise RunnerAlreadyStartedError(self.worker.task_def_name)

        self._generation += 1
        self._loop_task = asyncio.create_task(
            self._poll_loop(self._generation, self._loop_task),
            name=f"taskpoller-{self.worker.task_def_name}",
        )
        self._state = RunnerState.POLLING
        self.logger.info(
            f"Polling for {self.worker.task_def_name} "
            f"(worker_id={self.options.worker_id}, interval={self.options.poll_interval}s)"
        )
        return self._loop_task

    def stop_polling(self) -> None:
        """Stop polling once the current iteration finishes."""
        if self.is_polling:
            self.logger.info(f"Stopping runner for {self.worker.task_def_name}")
        self._state = RunnerState.STOPPED

    async def _poll_loop(self, generation: int, previous: Optional["asyncio.Task[None]"]) -> None:
        # A restart waits for the stopped loop to finish its last iteration.
        if previous is not None and not previous.done():
            await asyncio.wait({previous})

        while self.is_polling and self._generation == generation:
            await self.poll_once()
            await asyncio.sleep(self.options.poll_interval)

    async def poll_once(self) -> None:
        """Fetch one task and, if there is one, execute it and deliver its result."""
        try:
            task = await self.client.poll(
                self.worker.task_def_name,
                self.options.worker_id,
                self.options.domain,
            )
            if task is not None and task.task_id:
                await self.execute_task(task)
            else:
                self.logger.debug(f"No tasks for {self.worker.task_def_name}")
        except Exception as e:
            log_failure(self.logger, self.worker.task_def_name, Failure.capture(e))
            self._notify(e)

    async def execute_task(self, task: Task) -> None:
        try:
            output = await self.worker.execute(task)
            result = TaskResult.from_worker_output(task, output)
        except Exception as e:
            failure = Failure.capture(e)
            await self.update_task_with_retry(task, TaskResult.failed(task, failure.reason()))
            self._notify(e, task)
            self.logger.error(f"Error executing {task.task_id}: {failure.describe()}")
            return

        await self.update_task_with_retry(task, result)
        self.logger.debug(f"Finished polling for task {task.task_id}")

    async def update_task_with_retry(self, task: Task, result: TaskResult) -> None:
        """Deliver a result, retrying with linear backoff. Never raises."""
        retry_count = 0
        while retry_count < MAX_UPDATE_RETRIES:
            try:
                await self.client.update_task(result)
                return
            except Exception as e:
                self._notify(e, task)
                message = Failure.capture(e).message or ""
                self.logger.error(f"Error updating task {result.task_id} on retry {retry_count}: {message}")
                retry_count += 1
                await asyncio.sleep(retry_delay_seconds(retry_count))

        self.logger.error(f"Unable to update task {result.task_id} after {retry_count} retries")

    def _notify(self, error: Exception, task: Optional[Task] = None) -> None:
        try:
            if task is None:
                self.error_handler(error)
            else:
                self.error_handler(error, task)
        except Exception as handler_error:
            failure = Failure.capture(handler_error)
            self.logger.error(f"Error handler for {self.worker.task_def_name} raised: {failure.describe()}")
