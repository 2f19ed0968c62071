"""Task models and the abstract queue service interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from taskpoller.core.errors import InvalidWorkerOutputError


class TaskResultStatus(str, Enum):
    """Result status values understood by the queue service."""

    IN_PROGRESS = "IN_PROGRESS"
    FAILED = "FAILED"
    FAILED_WITH_TERMINAL_ERROR = "FAILED_WITH_TERMINAL_ERROR"
    COMPLETED = "COMPLETED"


class Task(BaseModel):
    """Work item handed out by the queue service.

    Read-only once fetched. Fields the runner does not know about are kept
    so workers can still reach them.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    task_id: Optional[str] = Field(default=None, alias="taskId")
    workflow_instance_id: Optional[str] = Field(default=None, alias="workflowInstanceId")
    task_def_name: Optional[str] = Field(default=None, alias="taskDefName")
    task_type: Optional[str] = Field(default=None, alias="taskType")
    domain: Optional[str] = None
    input_data: Dict[str, Any] = Field(default_factory=dict, alias="inputData")
    poll_count: Optional[int] = Field(default=None, alias="pollCount")
    retry_count: Optional[int] = Field(default=None, alias="retryCount")
    status: Optional[str] = None
    worker_id: Optional[str] = Field(default=None, alias="workerId")

    @classmethod
    def from_wire(cls, data: Mapping) -> "Task":
        return cls.model_validate(dict(data))

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class TaskResult(BaseModel):
    """Outcome of one task, sent once to the queue service and then dropped."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    workflow_instance_id: Optional[str] = Field(default=None, alias="workflowInstanceId")
    task_id: Optional[str] = Field(default=None, alias="taskId")
    status: str
    output_data: Dict[str, Any] = Field(default_factory=dict, alias="outputData")
    reason_for_incompletion: Optional[str] = Field(default=None, alias="reasonForIncompletion")
    worker_id: Optional[str] = Field(default=None, alias="workerId")
    logs: Optional[list] = None
    callback_after_seconds: Optional[int] = Field(default=None, alias="callbackAfterSeconds")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """Store enum members as their plain string value."""
        if isinstance(v, Enum):
            return v.value
        return v

    @field_validator("output_data", mode="before")
    @classmethod
    def default_output(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def failed(cls, task: Task, reason: str) -> "TaskResult":
        """Failure record for a task whose worker raised."""
        return cls(
            workflow_instance_id=task.workflow_instance_id,
            task_id=task.task_id,
            status=TaskResultStatus.FAILED,
            output_data={},
            reason_for_incompletion=reason,
        )

    @classmethod
    def from_worker_output(cls, task: Task, output: Any) -> "TaskResult":
        """
        Build a result from what a worker returned.

        Args:
            task: Task the worker executed
            output: TaskResult or mapping with at least a status

        Returns:
            TaskResult carrying the task's identifiers

        Raises:
            InvalidWorkerOutputError: If output cannot form a result
        """
        if isinstance(output, TaskResult):
            data = output.model_dump(by_alias=True, exclude_none=True)
        elif isinstance(output, Mapping):
            data = dict(output)
        else:
            raise InvalidWorkerOutputError(task.task_def_name, f"expected a mapping, got {type(output).__name__}")

        # Identifiers always come from the task, never from the worker.
        for name in ("workflow_instance_id", "task_id"):
            data.pop(name, None)
        data["workflowInstanceId"] = task.workflow_instance_id
        data["taskId"] = task.task_id

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidWorkerOutputError(task.task_def_name, str(e)) from e

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class TaskQueueService(ABC):
    """
    Abstract client for the remote task queue.

    Implementations:
    - ConductorTaskClient for a Conductor-compatible REST server
    - InMemoryTaskQueue for local development and tests
    """

    @abstractmethod
    async def poll(self, task_type: str, worker_id: str, domain: Optional[str] = None) -> Optional[Task]:
        """
        Lease the next task of a type.

        Args:
            task_type: Task definition name to poll for
            worker_id: Identity reported to the service
            domain: Optional routing domain

        Returns:
            Task or None if nothing is queued
        """
        pass

    @abstractmethod
    async def update_task(self, result: TaskResult) -> Any:
        """
        Report a task outcome.

        Args:
            result: Result to deliver

        Returns:
            Service acknowledgement
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None

    async def __aenter__(self) -> "TaskQueueService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
