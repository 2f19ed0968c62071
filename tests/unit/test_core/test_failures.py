"""Tests for failure capture and reporting."""

import logging
from collections.abc import Mapping
from unittest.mock import MagicMock

from hypothesis import HealthCheck, given, settings, strategies as st

from taskpoller.core.constants import DEFAULT_ERROR_MESSAGE
from taskpoller.core.errors import QueueServiceError
from taskpoller.core.failures import Failure, log_failure


class UnprintableError(Exception):
    def __str__(self):
        raise ValueError("cannot render")


class BrokenMessageError(Exception):
    @property
    def message(self):
        raise RuntimeError("message unavailable")


class BrokenMapping(Mapping):
    def __getitem__(self, key):
        raise KeyError(key)

    def __iter__(self):
        return iter(())

    def __len__(self):
        return 0

    def get(self, key, default=None):
        raise RuntimeError("lookup failed")


def raised(error):
    try:
        raise error
    except Exception as e:
        return e


class TestFailureCapture:
    """Extraction from different failure shapes."""

    def test_raised_exception_has_message_and_trace(self):
        error = raised(ValueError("boom"))

        failure = Failure.capture(error)

        assert failure.error is error
        assert failure.message == "boom"
        assert "ValueError: boom" in failure.trace

    def test_unraised_exception_has_no_trace(self):
        failure = Failure.capture(ValueError("boom"))

        assert failure.message == "boom"
        assert failure.trace is None

    def test_exception_without_message(self):
        failure = Failure.capture(raised(RuntimeError()))

        assert failure.message is None
        assert failure.reason() == DEFAULT_ERROR_MESSAGE

    def test_message_attribute_preferred(self):
        failure = Failure.capture(QueueServiceError("update", 503))

        assert failure.message == "Queue service update failed (HTTP 503)"

    def test_string_value(self):
        failure = Failure.capture("disk full")

        assert failure.message == "disk full"
        assert failure.trace is None

    def test_empty_string_value(self):
        assert Failure.capture("").message is None

    def test_mapping_value(self):
        failure = Failure.capture({"message": "remote failed", "stack": "at line 1"})

        assert failure.message == "remote failed"
        assert failure.trace == "at line 1"

    def test_mapping_with_non_string_fields(self):
        failure = Failure.capture({"message": 42})

        assert failure.message is None
        assert failure.trace is None

    def test_arbitrary_value(self):
        failure = Failure.capture(None)

        assert failure.error is None
        assert failure.message is None
        assert failure.reason() == DEFAULT_ERROR_MESSAGE
        assert failure.reason("fallback") == "fallback"

    def test_exception_whose_str_raises(self):
        error = raised(UnprintableError())

        failure = Failure.capture(error)

        assert failure.error is error
        assert failure.message is None
        assert failure.reason() == DEFAULT_ERROR_MESSAGE
        assert failure.describe().startswith("error: , stack: ")

    def test_message_property_that_raises_falls_back_to_str(self):
        failure = Failure.capture(BrokenMessageError("boom"))

        assert failure.message == "boom"

    def test_unreadable_mapping(self):
        failure = Failure.capture(BrokenMapping())

        assert failure.message is None
        assert failure.trace is None


failure_values = st.one_of(
    st.none(),
    st.text(),
    st.integers(),
    st.floats(allow_nan=True),
    st.dictionaries(st.sampled_from(["message", "stack", "code"]), st.one_of(st.text(), st.integers(), st.none())),
    st.builds(ValueError, st.text()),
    st.builds(RuntimeError),
    st.builds(UnprintableError),
    st.builds(BrokenMessageError, st.text()),
    st.builds(BrokenMapping),
)


class TestFailureCaptureProperties:
    """Capture holds for any value a worker or queue might fail with."""

    @given(failure_values)
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_capture_never_raises_and_reason_is_text(self, value):
        failure = Failure.capture(value)

        reason = failure.reason()
        assert isinstance(reason, str)
        assert reason
        assert isinstance(failure.describe(), str)

    @given(failure_values)
    @settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
    def test_raised_values_also_capture(self, value):
        if isinstance(value, BaseException):
            value = raised(value)

        failure = Failure.capture(value)

        assert failure.error is value
        assert failure.reason()


class TestLogFailure:
    """Single-line error reporting."""

    def test_logs_message_and_stack(self):
        logger = MagicMock(spec=logging.Logger)

        log_failure(logger, "resize", Failure(error="x", message="boom", trace="trace"))

        logger.error.assert_called_once_with("Error for resize: error: boom, stack: trace")

    def test_missing_fields_become_empty(self):
        logger = MagicMock(spec=logging.Logger)

        log_failure(logger, "resize", Failure.capture(object()))

        logger.error.assert_called_once_with("Error for resize: error: , stack: ")
