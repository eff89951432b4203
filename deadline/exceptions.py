from enum import Enum
from typing import Any, Optional

DEFAULT_TIMEOUT_MESSAGE = "Operation timed-out before completing."


class ExceptionKind(Enum):
    GENERIC = "Generic"
    TIMEOUT = "Timeout"
    REJECTION = "Rejection"


class DeadlineException(Exception):
    """
    Base error carrying a fixed ``kind`` discriminant.

    Handlers can check ``exc.is_timeout_exception`` (or compare ``exc.kind``)
    instead of relying on message text.
    """

    kind: ExceptionKind = ExceptionKind.GENERIC

    def __init__(self, message: Optional[str] = None, kind: Optional[ExceptionKind] = None) -> None:
        if kind is not None:
            self.kind = kind
        self.message = message if message is not None else "Error of type {}".format(self.kind.value)
        super().__init__(self.message)

    @property
    def is_exception(self) -> bool:
        return True

    @property
    def is_timeout_exception(self) -> bool:
        return self.kind == ExceptionKind.TIMEOUT

    def describe(self) -> str:
        name = "{} Error".format(self.kind.value)
        if isinstance(self.message, str) and len(self.message) > 0:
            return "{}: {}".format(name, self.message)
        return self.kind.value

    def __str__(self) -> str:
        return self.message


class TimeoutException(DeadlineException, TimeoutError):
    kind = ExceptionKind.TIMEOUT

    @classmethod
    def create_timeout(cls, message: Optional[str] = None) -> "TimeoutException":
        return cls(message if message is not None else DEFAULT_TIMEOUT_MESSAGE)


class Rejection(DeadlineException):
    """Raised in place of a promise rejection reason that is not an exception."""

    kind = ExceptionKind.REJECTION

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__("Promise rejected with {!r}".format(reason))
