"""
Booking Domain Services

Pure functions over bookings and booking collections:
- BookingCalculator: hours, prices, tax and refund arithmetic
- BookingValidator: business-rule checks returning ValidationResult
- BookingStatsCalculator: report figures over many bookings

Calculator range checks are integrity violations and raise; validator
checks are expected outcomes and are returned.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Sequence

from shared.domain.value_objects import Percentage, to_decimal
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.value_objects import (
    BookingSchedule,
    BookingStatus,
    Participant,
    PaymentStatus,
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a business-rule check"""
    valid: bool
    error: str | None = None
    conflicts: tuple[BookingSchedule, ...] = ()

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str, conflicts: Iterable[BookingSchedule] = ()) -> 'ValidationResult':
        return cls(valid=False, error=error, conflicts=tuple(conflicts))

    def __bool__(self) -> bool:
        return self.valid


# ===== Calculator =====

class BookingCalculator:
    """Booking arithmetic. Percentages must lie within [0, 100]."""

    @staticmethod
    def calculate_total_hours(schedules: Iterable[BookingSchedule]) -> float:
        return sum(schedule.get_duration() / 60 for schedule in schedules)

    @staticmethod
    def calculate_total_price(total_hours: float, package_price, hourly_rate=None) -> Decimal:
        """Hourly pricing when a rate is given, otherwise the package's flat price"""
        if hourly_rate is not None:
            return to_decimal(total_hours) * to_decimal(hourly_rate)
        return to_decimal(package_price)

    @staticmethod
    def calculate_discount_amount(price, discount_percentage) -> Decimal:
        return Percentage(discount_percentage).of(price)

    @classmethod
    def calculate_price_after_discount(cls, price, discount_percentage) -> Decimal:
        return to_decimal(price) - cls.calculate_discount_amount(price, discount_percentage)

    @staticmethod
    def calculate_tax_amount(price, tax_percentage) -> Decimal:
        return Percentage(tax_percentage).of(price)

    @classmethod
    def calculate_price_with_tax(cls, price, tax_percentage) -> Decimal:
        return to_decimal(price) + cls.calculate_tax_amount(price, tax_percentage)

    @staticmethod
    def calculate_refund_amount(total_price, paid_amount, cancellation_fee_percentage) -> Decimal:
        """Paid amount minus the cancellation fee, never negative"""
        fee = Percentage(cancellation_fee_percentage).of(total_price)
        return max(Decimal('0'), to_decimal(paid_amount) - fee)


# ===== Validator =====

class BookingValidator:
    """Business-rule checks. Never raises for a rule failure."""

    @staticmethod
    def validate_participant_age(
        participant: Participant,
        min_age: int | None = None,
        max_age: int | None = None,
        on: date | None = None,
    ) -> ValidationResult:
        age = participant.age(on)
        if min_age is not None and age < min_age:
            return ValidationResult.fail(
                f"{participant.full_name} must be at least {min_age} years old"
            )
        if max_age is not None and age > max_age:
            return ValidationResult.fail(
                f"{participant.full_name} must be at most {max_age} years old"
            )
        return ValidationResult.ok()

    @staticmethod
    def validate_schedule_conflicts(
        new_schedules: Iterable[BookingSchedule],
        existing_schedules: Sequence[BookingSchedule],
    ) -> ValidationResult:
        """Report every new schedule that overlaps an existing one"""
        conflicts = [
            schedule for schedule in new_schedules
            if any(schedule.conflicts_with(existing) for existing in existing_schedules)
        ]
        if conflicts:
            slots = ', '.join(str(schedule) for schedule in conflicts)
            return ValidationResult.fail(
                f"{len(conflicts)} schedule(s) conflict with existing sessions: {slots}",
                conflicts,
            )
        return ValidationResult.ok()

    @staticmethod
    def validate_booking_confirmation(booking: Booking) -> ValidationResult:
        if not booking.status.can_be_confirmed():
            return ValidationResult.fail(
                f"Booking cannot be confirmed from status {booking.status.value}"
            )
        if not booking.can_be_confirmed():
            return ValidationResult.fail("Booking must be fully paid before confirmation")
        if not booking.schedules:
            return ValidationResult.fail("Booking must have at least one schedule")
        if not booking.participants:
            return ValidationResult.fail("Booking must have at least one participant")
        return ValidationResult.ok()

    @staticmethod
    def validate_booking_cancellation(booking: Booking) -> ValidationResult:
        if not booking.can_be_cancelled():
            return ValidationResult.fail(
                f"Booking cannot be cancelled from status {booking.status.value}"
            )
        return ValidationResult.ok()

    @staticmethod
    def validate_minimum_hours(total_hours: float, minimum_hours: float) -> ValidationResult:
        if total_hours < minimum_hours:
            return ValidationResult.fail(f"Minimum booking is {minimum_hours} hours")
        return ValidationResult.ok()

    @staticmethod
    def validate_maximum_hours(total_hours: float, maximum_hours: float) -> ValidationResult:
        if total_hours > maximum_hours:
            return ValidationResult.fail(f"Maximum booking is {maximum_hours} hours")
        return ValidationResult.ok()

    @staticmethod
    def validate_payment_amount(booking: Booking, amount) -> ValidationResult:
        if not booking.payment_status.can_process_payment():
            return ValidationResult.fail(
                f"Cannot process payment for a booking with payment status "
                f"{booking.payment_status.value}"
            )
        if not booking.status.can_be_cancelled() and not booking.status.is_draft():
            return ValidationResult.fail(
                f"Cannot process payment for a {booking.status.value} booking"
            )
        amount = to_decimal(amount)
        if amount <= 0:
            return ValidationResult.fail("Payment amount must be greater than zero")
        remaining = booking.get_remaining_amount()
        if amount > remaining:
            return ValidationResult.fail(
                f"Payment amount ({amount}) exceeds outstanding balance ({remaining})"
            )
        return ValidationResult.ok()


# ===== Statistics =====

class BookingStatsCalculator:
    """Aggregate figures over a collection of bookings"""

    @staticmethod
    def calculate_total_revenue(bookings: Iterable[Booking]) -> Decimal:
        return sum(
            (b.paid_amount for b in bookings if b.payment_status.is_paid()),
            Decimal('0'),
        )

    @staticmethod
    def calculate_pending_revenue(bookings: Iterable[Booking]) -> Decimal:
        return sum(
            (b.total_price for b in bookings if b.payment_status.is_pending()),
            Decimal('0'),
        )

    @staticmethod
    def calculate_average_booking_value(bookings: Sequence[Booking]) -> Decimal:
        if not bookings:
            return Decimal('0')
        total = sum((b.total_price for b in bookings), Decimal('0'))
        return total / len(bookings)

    @staticmethod
    def count_by_status(bookings: Iterable[Booking]) -> dict[str, int]:
        counts = {status.value: 0 for status in BookingStatus}
        for booking in bookings:
            counts[booking.status.value] += 1
        return counts

    @staticmethod
    def count_by_payment_status(bookings: Iterable[Booking]) -> dict[str, int]:
        counts = {status.value: 0 for status in PaymentStatus}
        for booking in bookings:
            counts[booking.payment_status.value] += 1
        return counts

    @staticmethod
    def calculate_total_hours_booked(bookings: Iterable[Booking]) -> float:
        return sum(b.total_hours for b in bookings)

    @staticmethod
    def calculate_cancellation_rate(bookings: Sequence[Booking]) -> float:
        """Percentage of bookings that were cancelled"""
        if not bookings:
            return 0.0
        cancelled = sum(1 for b in bookings if b.status.is_cancelled())
        return cancelled / len(bookings) * 100

    @staticmethod
    def filter_by_date_range(bookings: Iterable[Booking], start: date, end: date) -> list[Booking]:
        """Bookings whose start date (or creation day) falls within [start, end]"""

        def reference_day(booking: Booking) -> date:
            if booking.start_date is not None:
                return booking.start_date
            return booking.created_at.date()

        start = start.date() if isinstance(start, datetime) else start
        end = end.date() if isinstance(end, datetime) else end
        return [b for b in bookings if start <= reference_day(b) <= end]
