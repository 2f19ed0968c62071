"""Core exception hierarchy for taskpoller.

All taskpoller exceptions inherit from TaskPollerError, enabling both
specific and broad exception handling.

Exception Hierarchy:
    TaskPollerError (base)
    ├── RunnerAlreadyStartedError - start requested while polling
    ├── QueueServiceError - queue service calls
    │   └── QueueAuthError
    ├── ConfigurationError - Config issues
    │   ├── InvalidConfigError
    │   └── DuplicateWorkerError
    └── WorkerError - Worker capability issues
        ├── WorkerLoadError
        └── InvalidWorkerOutputError
"""

from typing import Any, Dict, Optional


class TaskPollerError(Exception):
    """Base exception for all taskpoller errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "QUEUE_SERVICE")
        details: Optional dict with additional context
    """

    error_code: str = "TASKPOLLER_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a plain dict for structured reporting."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class RunnerAlreadyStartedError(TaskPollerError):
    """Polling was started on a runner that is already polling."""

    error_code = "RUNNER_ALREADY_STARTED"

    def __init__(self, task_def_name: Optional[str] = None):
        super().__init__("Runner is already started", details={"task_def_name": task_def_name})


# Queue Service Errors
class QueueServiceError(TaskPollerError):
    """A call to the remote queue service failed."""

    error_code = "QUEUE_SERVICE"

    def __init__(
        self,
        operation: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        msg = f"Queue service {operation} failed"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        if reason:
            msg += f": {reason}"
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(msg, details={"operation": operation, "status_code": status_code, "body": body})


class QueueAuthError(QueueServiceError):
    """Queue service rejected the configured credentials."""

    error_code = "QUEUE_AUTH"


# Configuration Errors
class ConfigurationError(TaskPollerError):
    """Base class for configuration errors."""

    error_code = "CONFIG_ERROR"


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""

    error_code = "INVALID_CONFIG"

    def __init__(self, config_key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid value for '{config_key}': {reason}",
            details={"config_key": config_key, "value": str(value), "reason": reason},
        )


class DuplicateWorkerError(ConfigurationError):
    """Two workers were registered for the same task type."""

    error_code = "DUPLICATE_WORKER"

    def __init__(self, task_def_name: str):
        super().__init__(
            f"Duplicate worker taskDefName: {task_def_name}",
            details={"task_def_name": task_def_name},
        )


# Worker Errors
class WorkerError(TaskPollerError):
    """Base class for worker capability errors."""

    error_code = "WORKER_ERROR"


class WorkerLoadError(WorkerError):
    """A worker spec could not be imported."""

    error_code = "WORKER_LOAD"

    def __init__(self, spec: str, reason: str):
        super().__init__(f"Cannot load worker '{spec}': {reason}", details={"spec": spec, "reason": reason})


class InvalidWorkerOutputError(WorkerError):
    """Worker returned something that is not a task result."""

    error_code = "INVALID_WORKER_OUTPUT"

    def __init__(self, task_def_name: Optional[str], reason: str):
        super().__init__(
            f"Worker for {task_def_name} returned invalid output: {reason}",
            details={"task_def_name": task_def_name, "reason": reason},
        )
