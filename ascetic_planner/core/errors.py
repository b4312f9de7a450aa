"""Planner exceptions and user-facing error classification."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class PlannerError(Exception):
    """Base class for errors reported back to the initiating action."""


class CapacityExceededError(PlannerError):
    """Target section is already holding as many tasks as it allows."""

    def __init__(self, section: str, capacity: float) -> None:
        self.section = section
        self.capacity = capacity
        super().__init__(f"Section {section} is full ({int(capacity)} tasks)")


class LockViolationError(PlannerError):
    """An edit was attempted while the field is discipline-locked."""

    def __init__(self, subject: str, remaining_ms: int) -> None:
        self.subject = subject
        self.remaining_ms = remaining_ms
        super().__init__(f"{subject} is locked for another {remaining_ms} ms")


class ValidationRejectedError(PlannerError, ValueError):
    """Input rejected before any mutation took place."""


class RemoteIOError(PlannerError):
    """Remote snapshot transport failed or returned a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class PersistenceIOError(PlannerError):
    """Local persistence read or write failed."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_CAPACITY_EXCEEDED = "ERR_CAPACITY_EXCEEDED"
    ERR_LOCKED = "ERR_LOCKED"
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_REMOTE_IO = "ERR_REMOTE_IO"
    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"
    ERR_NETWORK_ERROR = "ERR_NETWORK_ERROR"
    ERR_PERSISTENCE_IO = "ERR_PERSISTENCE_IO"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_ERROR_PATTERNS: dict[Literal["auth", "network"], dict[str, list[str] | set[str]]] = {
    "auth": {
        "phrases": ["unauthorized", "forbidden", "invalid api key", "master key", "401", "403"],
        "exception_types": {"PermissionError"},
    },
    "network": {
        "phrases": ["connection", "timeout", "network", "unreachable", "502", "503", "504"],
        "exception_types": {"ConnectionError", "TimeoutError", "ConnectError", "ReadTimeout"},
    },
}

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


def _match_error_pattern(*, error_str: str, exception_type: str, pattern_type: Literal["auth", "network"]) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised by a planner operation

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    error_str = str(exception).lower()
    exception_type = type(exception).__name__

    if isinstance(exception, CapacityExceededError):
        return ErrorResponse(
            code=ErrorCode.ERR_CAPACITY_EXCEEDED,
            message=f'Section "{exception.section}" is full.',
            suggestion="Finish or move something out first.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, LockViolationError):
        return ErrorResponse(
            code=ErrorCode.ERR_LOCKED,
            message=f"{exception.subject} is locked.",
            suggestion="Wait until the lock expires.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, ValidationRejectedError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            message=str(exception),
            suggestion="Check the input and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, KeyError):
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message="That task no longer exists.",
            suggestion="Refresh the task list.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, RemoteIOError):
        if exception.status in {HTTP_UNAUTHORIZED, HTTP_FORBIDDEN}:
            return ErrorResponse(
                code=ErrorCode.ERR_AUTHENTICATION_FAILED,
                message=f"Remote store rejected the credentials (status {exception.status}).",
                suggestion="Check REMOTE_MASTER_KEY and REMOTE_BIN_ID.",
                severity=ErrorSeverity.HIGH,
            )
        return ErrorResponse(
            code=ErrorCode.ERR_REMOTE_IO,
            message=f"Sync failed: {exception}",
            suggestion="Local data is unchanged. Try again later.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, PersistenceIOError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE_IO,
            message="Local storage is unavailable.",
            suggestion="Changes are kept in memory until storage recovers.",
            severity=ErrorSeverity.MEDIUM,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="auth"):
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message="Service authentication failed.",
            suggestion="Check your credentials.",
            severity=ErrorSeverity.HIGH,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="network"):
        return ErrorResponse(
            code=ErrorCode.ERR_NETWORK_ERROR,
            message="Network error occurred.",
            suggestion="Please check your connection and try again.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again. If the problem persists, check the logs.",
        severity=ErrorSeverity.MEDIUM,
    )
