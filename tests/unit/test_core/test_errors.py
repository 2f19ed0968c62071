"""Tests for core error hierarchy."""

from taskpoller.core.errors import (
    ConfigurationError,
    DuplicateWorkerError,
    InvalidConfigError,
    InvalidWorkerOutputError,
    QueueAuthError,
    QueueServiceError,
    RunnerAlreadyStartedError,
    TaskPollerError,
    WorkerError,
    WorkerLoadError,
)


class TestErrorHierarchy:
    """Test exception inheritance."""

    def test_all_errors_inherit_from_base(self):
        errors = [
            RunnerAlreadyStartedError("resize"),
            QueueServiceError("poll"),
            QueueAuthError("poll", 401),
            ConfigurationError("test"),
            InvalidConfigError("poll_interval", -1, "must be positive"),
            DuplicateWorkerError("resize"),
            WorkerLoadError("pkg:attr", "missing"),
            InvalidWorkerOutputError("resize", "bad"),
        ]

        for error in errors:
            assert isinstance(error, TaskPollerError)

    def test_grouping(self):
        assert isinstance(QueueAuthError("poll", 401), QueueServiceError)
        assert isinstance(DuplicateWorkerError("resize"), ConfigurationError)
        assert isinstance(WorkerLoadError("pkg:attr", "missing"), WorkerError)


class TestErrorMessages:
    """Messages, codes and details."""

    def test_already_started(self):
        error = RunnerAlreadyStartedError("resize")

        assert str(error) == "Runner is already started"
        assert error.error_code == "RUNNER_ALREADY_STARTED"
        assert error.details == {"task_def_name": "resize"}

    def test_queue_service_error_with_status(self):
        error = QueueServiceError("update", 503, body="unavailable")

        assert error.message == "Queue service update failed (HTTP 503)"
        assert error.status_code == 503
        assert error.body == "unavailable"

    def test_queue_service_error_with_reason(self):
        error = QueueServiceError("poll", reason="connection refused")

        assert error.message == "Queue service poll failed: connection refused"
        assert error.status_code is None

    def test_to_dict(self):
        error = DuplicateWorkerError("resize")

        assert error.to_dict() == {
            "error": True,
            "error_code": "DUPLICATE_WORKER",
            "message": "Duplicate worker taskDefName: resize",
            "details": {"task_def_name": "resize"},
        }

    def test_custom_error_code(self):
        error = TaskPollerError("test", error_code="CUSTOM")

        assert error.error_code == "CUSTOM"
