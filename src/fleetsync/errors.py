"""Custom exceptions for fleetsync."""

from typing import Any


class FleetsyncError(Exception):
    """Base exception for this package."""


class InvalidIdentifierError(FleetsyncError, ValueError):
    """Raised when a compound resource identifier cannot be parsed."""


class WaitError(FleetsyncError):
    """Base for every outcome of a state wait other than success."""


class UnexpectedStateError(WaitError):
    """Raised when the polled resource reports a terminal failure status."""

    def __init__(self, status: str, value: Any, reason: str | None = None) -> None:
        self.status = status
        self.value = value
        self.reason = reason
        message = f"Resource entered failure state {status!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class WaitTimeoutError(WaitError):
    """Raised when neither a target nor a failure status was seen in time."""

    def __init__(self, last_status: str | None, last_value: Any, timeout: float) -> None:
        self.last_status = last_status
        self.last_value = last_value
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout:.1f}s waiting for state change "
            f"(last status: {last_status!r})"
        )
