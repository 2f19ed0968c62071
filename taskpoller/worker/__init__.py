"""Worker module for polling, executing and reporting tasks."""

from .base import FunctionWorker, Worker, task_worker
from .manager import TaskManager
from .runner import RunnerState, TaskRunner, noop_error_handler

__all__ = [
    "Worker",
    "FunctionWorker",
    "task_worker",
    "TaskRunner",
    "RunnerState",
    "TaskManager",
    "noop_error_handler",
]
