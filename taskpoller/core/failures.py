"""Failure capture for arbitrary error values.

Workers and queue clients can fail with anything: exceptions with or
without a message, bare strings, or error-shaped mappings coming back
from a remote service. Failure turns such a value into a tagged record
with optional message and trace, so reporting never has to guess at
attributes.

Usage:
    from taskpoller.core.failures import Failure, log_failure

    try:
        ...
    except Exception as e:
        failure = Failure.capture(e)
        log_failure(logger, "image_resize", failure)
        reason = failure.reason()
"""

import logging
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

from taskpoller.core.constants import DEFAULT_ERROR_MESSAGE


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return str.__str__(value)
    return None


def _read(read: Callable[[], Any]) -> Optional[str]:
    """Run one extraction; a read that raises counts as an absent field."""
    try:
        return _text(read())
    except Exception:
        return None


@dataclass(frozen=True)
class Failure:
    """Diagnostic view of a failure value.

    Attributes:
        error: The original value, passed through unmodified
        message: Message carried by the value, if any
        trace: Formatted stack trace, if any
    """

    error: Any
    message: Optional[str] = None
    trace: Optional[str] = None

    @classmethod
    def capture(cls, error: Any) -> "Failure":
        """Extract whatever message and trace the value carries."""
        if isinstance(error, BaseException):
            message = _read(lambda: getattr(error, "message", None)) or _read(lambda: str(error))
            trace = None
            if error.__traceback__ is not None:
                trace = _read(lambda: "".join(traceback.format_exception(type(error), error, error.__traceback__)))
            return cls(error=error, message=message, trace=trace)

        if isinstance(error, str):
            return cls(error=error, message=_text(error))

        if isinstance(error, Mapping):
            return cls(
                error=error,
                message=_read(lambda: error.get("message")),
                trace=_read(lambda: error.get("stack")),
            )

        return cls(error=error)

    def reason(self, default: str = DEFAULT_ERROR_MESSAGE) -> str:
        """Message suitable for a result's reasonForIncompletion."""
        return self.message if self.message is not None else default

    def describe(self) -> str:
        return f"error: {self.message or ''}, stack: {self.trace or ''}"


def log_failure(logger: logging.Logger, task_type: Optional[str], failure: Failure) -> None:
    """Write one error line for a failure seen by the runner of `task_type`."""
    logger.error(f"Error for {task_type}: {failure.describe()}")
