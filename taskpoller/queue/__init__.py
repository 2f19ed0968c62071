"""Queue service clients and task models."""

from typing import Literal

from .base import Task, TaskQueueService, TaskResult, TaskResultStatus
from .http_queue import ConductorTaskClient
from .memory_queue import InMemoryTaskQueue

QueueType = Literal["http", "memory"]


def create_queue(queue_type: QueueType, **kwargs) -> TaskQueueService:
    """
    Factory function to create the appropriate queue service client.

    Args:
        queue_type: Either "http" or "memory"
        **kwargs: Client-specific configuration

    Returns:
        Initialized queue service client

    Raises:
        ValueError: If queue_type is not supported
    """
    if queue_type == "http":
        return ConductorTaskClient(**kwargs)
    elif queue_type == "memory":
        return InMemoryTaskQueue(**kwargs)
    else:
        raise ValueError(f"Unsupported queue type: {queue_type}")


__all__ = [
    "Task",
    "TaskResult",
    "TaskResultStatus",
    "TaskQueueService",
    "ConductorTaskClient",
    "InMemoryTaskQueue",
    "create_queue",
    "QueueType",
]
