"""Unit tests for the Booking aggregate.

Run with: pytest apps/bookings/tests/test_booking_aggregate.py -v
"""

from datetime import datetime
from decimal import Decimal

import pytest

from shared.domain.errors import IntegrityViolation
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.value_objects import BookingReference, BookingStatus, PaymentStatus


@pytest.fixture
def create_kwargs(parent, child, make_schedule):
    return {
        "id": "booking-42",
        "package_id": "package-1",
        "package_slug": "holiday-club",
        "parent_guardian": parent,
        "participants": [child],
        "schedules": [make_schedule()],
        "total_hours": 2,
        "total_price": Decimal("80.00"),
    }


class TestCreate:
    def test_new_booking_is_draft_and_unpaid(self, create_kwargs):
        booking = Booking.create(**create_kwargs)

        assert booking.status is BookingStatus.DRAFT
        assert booking.payment_status is PaymentStatus.PENDING
        assert booking.paid_amount == Decimal("0")
        assert booking.created_at == booking.updated_at
        assert booking.reference.value.startswith("BK")

    def test_accepts_reserved_reference(self, create_kwargs):
        booking = Booking.create(**create_kwargs, reference=BookingReference("BK-RESERVED"))
        assert booking.reference == BookingReference("BK-RESERVED")

    def test_zero_hours_is_rejected(self, create_kwargs):
        create_kwargs["total_hours"] = 0
        with pytest.raises(IntegrityViolation, match="greater than zero"):
            Booking.create(**create_kwargs)

    def test_draft_without_schedules_is_allowed(self, create_kwargs):
        create_kwargs["schedules"] = []
        booking = Booking.create(**create_kwargs)

        assert booking.status is BookingStatus.DRAFT
        assert not booking.has_schedules()

    def test_requires_a_participant(self, create_kwargs):
        create_kwargs["participants"] = []
        with pytest.raises(IntegrityViolation, match="participant"):
            Booking.create(**create_kwargs)

    def test_requires_package_id(self, create_kwargs):
        create_kwargs["package_id"] = ""
        with pytest.raises(IntegrityViolation, match="Package ID"):
            Booking.create(**create_kwargs)

    def test_requires_id(self, create_kwargs):
        create_kwargs["id"] = " "
        with pytest.raises(IntegrityViolation, match="Booking ID"):
            Booking.create(**create_kwargs)

    def test_negative_price_is_rejected(self, create_kwargs):
        create_kwargs["total_price"] = Decimal("-1")
        with pytest.raises(IntegrityViolation, match="negative"):
            Booking.create(**create_kwargs)

    def test_free_booking_is_allowed(self, create_kwargs):
        create_kwargs["total_price"] = 0
        assert Booking.create(**create_kwargs).total_price == Decimal("0")


class TestInvariants:
    @pytest.mark.parametrize("paid", ["-0.01", "100.01", "250"])
    def test_paid_amount_must_be_within_total(self, make_booking, paid):
        with pytest.raises(IntegrityViolation, match="between 0 and total price"):
            make_booking(paid_amount=Decimal(paid))

    @pytest.mark.parametrize("paid", ["0", "0.01", "50", "100.00"])
    def test_paid_amount_boundaries(self, make_booking, paid):
        booking = make_booking(paid_amount=Decimal(paid))
        assert Decimal("0") <= booking.paid_amount <= booking.total_price

    @pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CANCELLED])
    def test_non_draft_booking_needs_schedules(self, make_booking, status):
        with pytest.raises(IntegrityViolation, match="At least one schedule"):
            make_booking(status=status, schedules=[])

    def test_confirmed_and_paid_booking_may_have_no_schedules(self, make_booking):
        booking = make_booking(
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            paid_amount=Decimal("100.00"),
            schedules=[],
        )
        assert not booking.has_schedules()

    @pytest.mark.parametrize("payment_status", [PaymentStatus.PAID, PaymentStatus.REFUNDED])
    def test_paid_booking_cancelled_before_any_session(self, make_booking, payment_status):
        booking = make_booking(
            status=BookingStatus.CANCELLED,
            payment_status=payment_status,
            paid_amount=Decimal("100.00"),
            schedules=[],
            cancellation_reason="Plans changed",
            cancelled_at=datetime(2026, 10, 17, 12, 0),
        )
        assert booking.status.is_cancelled()
        assert not booking.has_schedules()

    def test_confirmed_but_partially_paid_needs_schedules(self, make_booking):
        with pytest.raises(IntegrityViolation):
            make_booking(
                status=BookingStatus.CONFIRMED,
                payment_status=PaymentStatus.PARTIAL,
                paid_amount=Decimal("40"),
                schedules=[],
            )

    def test_statuses_are_parsed_from_strings(self, make_booking):
        booking = make_booking(status="confirmed", payment_status="partial", paid_amount="20")
        assert booking.status is BookingStatus.CONFIRMED
        assert booking.payment_status is PaymentStatus.PARTIAL
        assert booking.paid_amount == Decimal("20")

    def test_unknown_status_is_rejected(self, make_booking):
        with pytest.raises(IntegrityViolation):
            make_booking(status="archived")

    def test_evolve_revalidates(self, make_booking):
        booking = make_booking()
        with pytest.raises(IntegrityViolation):
            booking.evolve(paid_amount=Decimal("500"))

    def test_evolve_returns_a_new_instance(self, make_booking):
        booking = make_booking(updated_at=datetime(2026, 1, 1, 9, 0))
        paid = booking.evolve(payment_status=PaymentStatus.PARTIAL, paid_amount=Decimal("10"))

        assert booking.paid_amount == Decimal("0")
        assert paid.paid_amount == Decimal("10")
        assert paid.updated_at > booking.updated_at
        assert paid == booking  # same identity

    def test_aggregate_is_frozen(self, make_booking):
        booking = make_booking()
        with pytest.raises(AttributeError):
            booking.status = BookingStatus.CONFIRMED


class TestQueries:
    def test_remaining_amount(self, make_booking):
        booking = make_booking(payment_status=PaymentStatus.PARTIAL, paid_amount=Decimal("30"))

        assert booking.get_remaining_amount() == Decimal("70.00")
        assert booking.has_outstanding_balance()
        assert not booking.is_fully_paid()

    def test_fully_paid(self, make_booking):
        booking = make_booking(payment_status=PaymentStatus.PAID, paid_amount=Decimal("100"))

        assert booking.is_fully_paid()
        assert not booking.has_outstanding_balance()

    def test_can_be_confirmed_requires_payment(self, make_booking):
        assert not make_booking().can_be_confirmed()
        paid = make_booking(payment_status=PaymentStatus.PAID, paid_amount=Decimal("100"))
        assert paid.can_be_confirmed()

    def test_can_be_cancelled_follows_status(self, make_booking):
        assert make_booking().can_be_cancelled()
        assert not make_booking(status=BookingStatus.DRAFT).can_be_cancelled()

    def test_string_forms(self, make_booking):
        booking = make_booking()
        assert str(booking) == "Booking BK20260101TEST01 (pending)"
        assert "status=pending" in repr(booking)
