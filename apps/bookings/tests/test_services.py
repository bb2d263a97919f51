"""Unit tests for booking domain services.

Run with: pytest apps/bookings/tests/test_services.py -v
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from shared.domain.errors import IntegrityViolation
from apps.bookings.domain.services import (
    BookingCalculator,
    BookingStatsCalculator,
    BookingValidator,
    ValidationResult,
)
from apps.bookings.domain.value_objects import BookingStatus, Participant, PaymentStatus


class TestValidationResult:
    def test_truthiness(self):
        assert ValidationResult.ok()
        assert not ValidationResult.fail("nope")
        assert ValidationResult.fail("nope").error == "nope"


class TestBookingCalculator:
    def test_total_hours(self, make_schedule):
        schedules = [
            make_schedule(start="09:00", end="10:30"),
            make_schedule(days_ahead=11, start="13:00", end="15:00"),
        ]
        assert BookingCalculator.calculate_total_hours(schedules) == 3.5

    def test_total_hours_of_nothing(self):
        assert BookingCalculator.calculate_total_hours([]) == 0

    def test_total_price_uses_hourly_rate_when_given(self):
        assert BookingCalculator.calculate_total_price(3.5, Decimal("500"), hourly_rate=20) == Decimal("70")

    def test_total_price_falls_back_to_package_price(self):
        assert BookingCalculator.calculate_total_price(3.5, Decimal("500")) == Decimal("500")

    def test_discount(self):
        assert BookingCalculator.calculate_discount_amount(Decimal("80"), 25) == Decimal("20")
        assert BookingCalculator.calculate_price_after_discount(Decimal("80"), 25) == Decimal("60")

    def test_tax(self):
        assert BookingCalculator.calculate_tax_amount(Decimal("100"), 20) == Decimal("20")
        assert BookingCalculator.calculate_price_with_tax(Decimal("100"), 20) == Decimal("120")

    @pytest.mark.parametrize("percentage", [-5, 101])
    def test_percentages_outside_range_raise(self, percentage):
        with pytest.raises(IntegrityViolation):
            BookingCalculator.calculate_discount_amount(Decimal("100"), percentage)
        with pytest.raises(IntegrityViolation):
            BookingCalculator.calculate_tax_amount(Decimal("100"), percentage)
        with pytest.raises(IntegrityViolation):
            BookingCalculator.calculate_refund_amount(Decimal("100"), Decimal("50"), percentage)

    def test_refund_subtracts_fee_from_paid_amount(self):
        refund = BookingCalculator.calculate_refund_amount(
            total_price=Decimal("100"), paid_amount=Decimal("80"), cancellation_fee_percentage=30
        )
        assert refund == Decimal("50")

    def test_refund_never_negative(self):
        refund = BookingCalculator.calculate_refund_amount(Decimal("100"), Decimal("20"), 50)
        assert refund == Decimal("0")

    def test_full_refund_without_fee(self):
        assert BookingCalculator.calculate_refund_amount(Decimal("100"), Decimal("100"), 0) == Decimal("100")


class TestBookingValidator:
    def test_participant_age_bounds(self):
        child = Participant(first_name="Amy", last_name="Doe", date_of_birth=date(2019, 5, 1))
        on = date(2026, 10, 17)

        assert BookingValidator.validate_participant_age(child, min_age=5, max_age=12, on=on)
        too_young = BookingValidator.validate_participant_age(child, min_age=8, on=on)
        assert not too_young
        assert "at least 8" in too_young.error
        too_old = BookingValidator.validate_participant_age(child, max_age=6, on=on)
        assert "at most 6" in too_old.error

    def test_schedule_conflicts_reports_every_conflict(self, make_schedule):
        existing = [make_schedule(start="10:00", end="12:00")]
        first = make_schedule(start="09:00", end="10:30")
        second = make_schedule(start="11:30", end="13:00")
        clear = make_schedule(start="12:00", end="13:00")

        result = BookingValidator.validate_schedule_conflicts([first, clear, second], existing)

        assert not result.valid
        assert result.conflicts == (first, second)
        assert result.error.startswith("2 schedule(s) conflict")

    def test_no_conflicts(self, make_schedule):
        existing = [make_schedule(start="10:00", end="12:00")]
        result = BookingValidator.validate_schedule_conflicts(
            [make_schedule(days_ahead=12, start="10:00", end="12:00")], existing
        )
        assert result.valid
        assert result.conflicts == ()

    def test_confirmation_requires_pending_status(self, make_booking):
        result = BookingValidator.validate_booking_confirmation(
            make_booking(status=BookingStatus.DRAFT)
        )
        assert result.error == "Booking cannot be confirmed from status draft"

    def test_confirmation_requires_full_payment(self, make_booking):
        result = BookingValidator.validate_booking_confirmation(
            make_booking(payment_status=PaymentStatus.PARTIAL, paid_amount=Decimal("50"))
        )
        assert result.error == "Booking must be fully paid before confirmation"

    def test_confirmation_ok(self, make_booking):
        booking = make_booking(payment_status=PaymentStatus.PAID, paid_amount=Decimal("100"))
        assert BookingValidator.validate_booking_confirmation(booking).valid

    @pytest.mark.parametrize("status", [BookingStatus.DRAFT, BookingStatus.CANCELLED, BookingStatus.COMPLETED])
    def test_cancellation_refused(self, make_booking, status):
        result = BookingValidator.validate_booking_cancellation(make_booking(status=status))
        assert result.error == f"Booking cannot be cancelled from status {status.value}"

    def test_cancellation_allowed(self, make_booking):
        assert BookingValidator.validate_booking_cancellation(make_booking())

    def test_hour_limits(self):
        assert BookingValidator.validate_minimum_hours(4, 4)
        assert not BookingValidator.validate_minimum_hours(3.5, 4)
        assert BookingValidator.validate_maximum_hours(40, 40)
        assert not BookingValidator.validate_maximum_hours(40.5, 40)

    def test_payment_amount(self, make_booking):
        booking = make_booking(payment_status=PaymentStatus.PARTIAL, paid_amount=Decimal("60"))

        assert BookingValidator.validate_payment_amount(booking, Decimal("40"))
        assert not BookingValidator.validate_payment_amount(booking, 0)
        over = BookingValidator.validate_payment_amount(booking, Decimal("40.01"))
        assert "exceeds outstanding balance" in over.error

    def test_payment_refused_when_already_paid(self, make_booking):
        booking = make_booking(payment_status=PaymentStatus.PAID, paid_amount=Decimal("100"))
        assert not BookingValidator.validate_payment_amount(booking, 1)

    def test_payment_refused_for_cancelled_booking(self, make_booking):
        booking = make_booking(status=BookingStatus.CANCELLED)
        assert not BookingValidator.validate_payment_amount(booking, 10)


class TestBookingStatsCalculator:
    @pytest.fixture
    def bookings(self, make_booking):
        return [
            make_booking(id="b1", payment_status=PaymentStatus.PAID, paid_amount=Decimal("100"),
                         status=BookingStatus.CONFIRMED),
            make_booking(id="b2", total_price=Decimal("60"), total_hours=3),
            make_booking(id="b3", payment_status=PaymentStatus.PARTIAL, paid_amount=Decimal("20"),
                         total_price=Decimal("40")),
            make_booking(id="b4", status=BookingStatus.CANCELLED, total_hours=1.5),
        ]

    def test_revenue(self, bookings):
        assert BookingStatsCalculator.calculate_total_revenue(bookings) == Decimal("100")
        assert BookingStatsCalculator.calculate_pending_revenue(bookings) == Decimal("160")

    def test_average_booking_value(self, bookings):
        assert BookingStatsCalculator.calculate_average_booking_value(bookings) == Decimal("75")
        assert BookingStatsCalculator.calculate_average_booking_value([]) == Decimal("0")

    def test_count_by_status_covers_every_status(self, bookings):
        counts = BookingStatsCalculator.count_by_status(bookings)

        assert counts == {"draft": 0, "pending": 2, "confirmed": 1, "cancelled": 1, "completed": 0}
        assert sum(counts.values()) == len(bookings)

    def test_count_by_payment_status(self, bookings):
        counts = BookingStatsCalculator.count_by_payment_status(bookings)

        assert counts["pending"] == 2
        assert counts["paid"] == 1
        assert counts["partial"] == 1
        assert sum(counts.values()) == len(bookings)

    def test_counts_of_empty_collection(self):
        assert sum(BookingStatsCalculator.count_by_status([]).values()) == 0

    def test_total_hours_and_cancellation_rate(self, bookings):
        assert BookingStatsCalculator.calculate_total_hours_booked(bookings) == 8.5
        assert BookingStatsCalculator.calculate_cancellation_rate(bookings) == 25.0
        assert BookingStatsCalculator.calculate_cancellation_rate([]) == 0.0

    def test_filter_by_date_range_is_inclusive(self, make_booking):
        start = date.today() + timedelta(days=10)
        early = make_booking(id="early", start_date=start)
        late = make_booking(id="late", start_date=start + timedelta(days=5))
        undated = make_booking(id="undated", start_date=None, created_at=datetime(2026, 3, 1, 9, 0))

        in_range = BookingStatsCalculator.filter_by_date_range(
            [early, late, undated], start, start + timedelta(days=5)
        )
        assert in_range == [early, late]

        by_creation = BookingStatsCalculator.filter_by_date_range(
            [early, late, undated], date(2026, 3, 1), date(2026, 3, 1)
        )
        assert by_creation == [undated]
