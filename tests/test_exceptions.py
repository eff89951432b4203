import pytest

from deadline import DEFAULT_TIMEOUT_MESSAGE, DeadlineException, ExceptionKind, Rejection, TimeoutException


class TestExceptionKinds:
    def test_timeout_marker(self):
        error = TimeoutException.create_timeout()

        assert error.kind == ExceptionKind.TIMEOUT
        assert error.is_timeout_exception is True
        assert error.is_exception is True
        assert error.message == DEFAULT_TIMEOUT_MESSAGE

    def test_custom_timeout_message(self):
        assert TimeoutException.create_timeout("slow").message == "slow"

    def test_generic_is_not_timeout(self):
        error = DeadlineException("bad")

        assert error.kind == ExceptionKind.GENERIC
        assert error.is_timeout_exception is False
        assert error.is_exception is True

    def test_explicit_kind(self):
        error = DeadlineException("tagged", kind=ExceptionKind.TIMEOUT)
        assert error.is_timeout_exception

    def test_default_message_names_kind(self):
        assert DeadlineException().message == "Error of type Generic"
        assert TimeoutException().message == "Error of type Timeout"

    def test_describe(self):
        assert TimeoutException.create_timeout().describe() == "Timeout Error: Operation timed-out before completing."
        assert DeadlineException("").describe() == "Generic"

    def test_catchable_as_builtin_timeout(self):
        with pytest.raises(TimeoutError):
            raise TimeoutException.create_timeout()

    def test_rejection_keeps_reason(self):
        reason = {"code": 42}
        error = Rejection(reason)

        assert error.reason is reason
        assert error.kind == ExceptionKind.REJECTION
        assert not error.is_timeout_exception
