"""Booking workflow errors raised by the application layer."""

from shared.domain.errors import DomainError, ErrorCode
from apps.bookings.domain.services import ValidationResult


class BookingNotFoundError(DomainError):
    """Raised when a booking is not found."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class BookingRuleViolation(DomainError):
    """
    Raised when a workflow refuses an action on business grounds.

    Carries the validator's user-facing message unchanged.
    """

    code = ErrorCode.RULE_VIOLATION

    def __init__(self, message: str, result: ValidationResult | None = None) -> None:
        super().__init__(message)
        self.result = result

    @classmethod
    def from_result(cls, result: ValidationResult) -> "BookingRuleViolation":
        return cls(result.error or "Business rule violated", result)


class ReferenceGenerationError(DomainError):
    """Raised when no unique booking reference could be issued."""

    code = ErrorCode.REFERENCE_GENERATION_FAILED

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Failed to generate unique booking reference after {attempts} attempts"
        )
        self.attempts = attempts
