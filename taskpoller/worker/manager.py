"""Supervises a set of task runners, one group per worker."""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from taskpoller.config import RunnerOptions
from taskpoller.core.errors import ConfigurationError, DuplicateWorkerError, RunnerAlreadyStartedError
from taskpoller.queue.base import TaskQueueService

from .base import Worker
from .runner import TaskErrorHandler, TaskRunner

logger = logging.getLogger(__name__)


class TaskManager:
    """
    Starts and stops polling for several workers at once.

    Each worker gets `concurrency` runners. Runners are independent: they
    share the queue client but no mutable state, and each keeps at most one
    task in flight.
    """

    def __init__(
        self,
        client: TaskQueueService,
        workers: Iterable[Worker],
        options: Optional[RunnerOptions] = None,
        logger: Optional[logging.Logger] = None,
        on_error: Optional[TaskErrorHandler] = None,
    ):
        """
        Initialize manager.

        Args:
            client: Queue service shared by all runners
            workers: Workers to poll for, unique by task_def_name
            options: Defaults for every runner; worker attributes override them
            logger: Logger passed to runners (default: module loggers)
            on_error: Error callback passed to runners

        Raises:
            ConfigurationError: If no workers are given
            DuplicateWorkerError: If two workers share a task_def_name
        """
        self.client = client
        self.workers: List[Worker] = list(workers)
        self.options = options or RunnerOptions()
        self.logger = logger
        self.on_error = on_error
        self.runners: List[TaskRunner] = []
        self._tasks: List["asyncio.Task[None]"] = []

        if not self.workers:
            raise ConfigurationError("At least one worker is required")

        seen: Dict[str, Worker] = {}
        for worker in self.workers:
            if worker.task_def_name in seen:
                raise DuplicateWorkerError(worker.task_def_name)
            seen[worker.task_def_name] = worker

    @property
    def is_polling(self) -> bool:
        return any(runner.is_polling for runner in self.runners)

    def options_for(self, worker: Worker) -> RunnerOptions:
        return self.options.merged(**worker.overrides())

    def _build_runners(self) -> List[TaskRunner]:
        runners = []
        for worker in self.workers:
            worker_options = self.options_for(worker)
            for _ in range(worker_options.concurrency):
                runners.append(
                    TaskRunner(
                        worker=worker,
                        client=self.client,
                        options=worker_options,
                        logger=self.logger,
                        on_error=self.on_error,
                    )
                )
        return runners

    def start_polling(self) -> None:
        """Start every runner on the running event loop.

        Runners are built once and reused on restart, so a restarted loop
        waits for its stopped predecessor and concurrency stays bounded.
        """
        if self.is_polling:
            raise RunnerAlreadyStartedError()

        if not self.runners:
            self.runners = self._build_runners()
        self._tasks = [runner.start_polling() for runner in self.runners]

        logger.info(f"Started {len(self.runners)} runners for {len(self.workers)} workers")

    def stop_polling(self) -> None:
        """Ask every runner to stop after its current iteration."""
        for runner in self.runners:
            runner.stop_polling()
        logger.info("Task manager stopping")

    async def join(self) -> None:
        """Wait until every runner loop has exited."""
        if self._tasks:
            await asyncio.gather(*self._tasks)
        logger.info("Task manager stopped")
