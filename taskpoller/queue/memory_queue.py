"""In-process lease queue for local development and tests."""

import asyncio
import itertools
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .base import Task, TaskQueueService, TaskResult, TaskResultStatus

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    task: Task
    seq: int
    leased_by: Optional[str] = None
    lease_expires_at: Optional[float] = None
    poll_count: int = 0


@dataclass
class UpdateRecord:
    """A result accepted by the queue."""

    result: TaskResult
    received_at: float = field(default_factory=time.monotonic)


class InMemoryTaskQueue(TaskQueueService):
    """
    Lease-based task queue held in memory.

    Polling leases the oldest matching task to the caller. A task whose
    lease runs out before a result arrives is offered again, which is how
    a stuck or crashed runner's work gets picked up by someone else.
    """

    def __init__(self, lease_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        """
        Initialize queue.

        Args:
            lease_seconds: How long a polled task stays reserved
            clock: Monotonic time source (seconds)
        """
        self.lease_seconds = lease_seconds
        self._clock = clock
        self._seq = itertools.count()
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self.updates: List[UpdateRecord] = []

    def add_task(
        self,
        task_def_name: str,
        input_data: Optional[Dict[str, Any]] = None,
        workflow_instance_id: Optional[str] = None,
        domain: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> Task:
        """Enqueue a new task and return it."""
        task = Task(
            task_id=task_id or str(uuid.uuid4()),
            workflow_instance_id=workflow_instance_id or str(uuid.uuid4()),
            task_def_name=task_def_name,
            task_type=task_def_name,
            domain=domain,
            input_data=input_data or {},
            status="SCHEDULED",
        )
        self._entries[task.task_id] = _Entry(task=task, seq=next(self._seq))
        logger.debug(f"Queued task {task.task_id} ({task_def_name})")
        return task

    def pending(self, task_def_name: Optional[str] = None) -> List[Task]:
        """Tasks not yet completed, leased or not."""
        return [
            e.task
            for e in sorted(self._entries.values(), key=lambda e: e.seq)
            if task_def_name is None or e.task.task_def_name == task_def_name
        ]

    def _available(self, entry: _Entry, now: float) -> bool:
        if entry.leased_by is None:
            return True
        if entry.lease_expires_at is not None and entry.lease_expires_at <= now:
            logger.info(f"Lease on task {entry.task.task_id} held by {entry.leased_by} expired")
            entry.leased_by = None
            entry.lease_expires_at = None
            return True
        return False

    async def poll(self, task_type: str, worker_id: str, domain: Optional[str] = None) -> Optional[Task]:
        async with self._lock:
            now = self._clock()
            candidates = sorted(self._entries.values(), key=lambda e: e.seq)
            for entry in candidates:
                if entry.task.task_def_name != task_type or entry.task.domain != domain:
                    continue
                if not self._available(entry, now):
                    continue

                entry.leased_by = worker_id
                entry.lease_expires_at = now + self.lease_seconds
                entry.poll_count += 1
                return entry.task.model_copy(
                    update={"worker_id": worker_id, "poll_count": entry.poll_count, "status": "IN_PROGRESS"}
                )
            return None

    async def update_task(self, result: TaskResult) -> str:
        async with self._lock:
            entry = self._entries.get(result.task_id)
            if entry is None:
                raise KeyError(f"Unknown task {result.task_id}")

            self.updates.append(UpdateRecord(result=result))
            if result.status == TaskResultStatus.IN_PROGRESS.value:
                entry.leased_by = None
                entry.lease_expires_at = None
            else:
                del self._entries[result.task_id]
            return result.task_id
