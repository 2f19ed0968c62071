"""Taskpoller package exports.

Keep package import lightweight by lazily importing the worker and queue modules.
"""

import logging
from typing import TYPE_CHECKING, Any

__version__ = "0.4.0"

# Library logging stays silent unless the host application configures it.
logging.getLogger(__name__).addHandler(logging.NullHandler())

if TYPE_CHECKING:
    from .config import AppConfig, RunnerOptions
    from .queue import Task, TaskResult, create_queue
    from .worker import TaskManager, TaskRunner, Worker

__all__ = [
    "AppConfig",
    "RunnerOptions",
    "Task",
    "TaskResult",
    "TaskManager",
    "TaskRunner",
    "Worker",
    "create_queue",
]


def __getattr__(name: str) -> Any:
    """Lazily resolve top-level exports."""
    if name in {"AppConfig", "RunnerOptions"}:
        from . import config

        return getattr(config, name)

    if name in {"Task", "TaskResult", "create_queue"}:
        from . import queue

        return getattr(queue, name)

    if name in {"TaskManager", "TaskRunner", "Worker"}:
        from . import worker

        return getattr(worker, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
