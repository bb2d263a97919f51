"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from shared.application.message_bus import MessageBus
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.value_objects import (
    BookingReference,
    BookingSchedule,
    BookingStatus,
    ParentGuardian,
    Participant,
    PaymentStatus,
)


@pytest.fixture
def parent() -> ParentGuardian:
    return ParentGuardian(
        first_name="Jane",
        last_name="Doe",
        email="jane.doe@example.com",
        phone="+44 7700 900123",
        address="1 High Street, Leeds",
    )


@pytest.fixture
def child() -> Participant:
    return Participant(
        first_name="Amy",
        last_name="Doe",
        date_of_birth=date(date.today().year - 8, 1, 1),
    )


@pytest.fixture
def make_schedule():
    def factory(days_ahead: int = 10, start: str = "10:00", end: str = "12:00", **kwargs) -> BookingSchedule:
        return BookingSchedule.from_strings(
            date.today() + timedelta(days=days_ahead), start, end, **kwargs
        )

    return factory


@pytest.fixture
def make_booking(parent, child, make_schedule):
    """Build a booking through `reconstitute`; keyword arguments override defaults."""

    def factory(**overrides) -> Booking:
        now = datetime.now()
        schedule = make_schedule()
        fields = {
            "id": "booking-1",
            "reference": BookingReference("BK20260101TEST01"),
            "package_id": "package-1",
            "package_slug": "holiday-club",
            "status": BookingStatus.PENDING,
            "payment_status": PaymentStatus.PENDING,
            "parent_guardian": parent,
            "participants": [child],
            "schedules": [schedule],
            "total_hours": 2,
            "total_price": Decimal("100.00"),
            "paid_amount": Decimal("0"),
            "created_at": now,
            "updated_at": now,
            "start_date": schedule.date,
        }
        fields.update(overrides)
        return Booking.reconstitute(**fields)

    return factory


@pytest.fixture
def bus() -> MessageBus:
    return MessageBus()
