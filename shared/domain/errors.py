"""Domain error codes and exception types shared by every bounded context."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INTEGRITY_VIOLATION = "INTEGRITY_VIOLATION"
    NOT_FOUND = "NOT_FOUND"
    RULE_VIOLATION = "RULE_VIOLATION"
    REFERENCE_GENERATION_FAILED = "REFERENCE_GENERATION_FAILED"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.RULE_VIOLATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class IntegrityViolation(DomainError, ValueError):
    """
    Raised when malformed or inconsistent data is supplied at construction.

    These are hard failures: callers catch them only at a boundary
    (creation workflow or persistence rehydration) and never retry.
    """

    code = ErrorCode.INTEGRITY_VIOLATION

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
