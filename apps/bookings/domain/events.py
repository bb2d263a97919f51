"""
Booking Domain Events

Snapshots of things that have happened in the booking domain. They are
derived from a Booking with `from_booking()` and published after the
surrounding transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shared.domain.base import DomainEvent
from shared.domain.errors import IntegrityViolation
from apps.bookings.domain.entities import Booking


@dataclass(frozen=True, kw_only=True)
class BookingCreatedEvent(DomainEvent):
    """
    Event: A new booking was created

    Triggers:
    - Send booking acknowledgement to the parent
    - Notify admins of a new draft
    """
    booking_id: str
    reference: str
    package_id: str
    parent_email: str
    participant_count: int
    total_hours: float
    total_price: Decimal
    created_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> 'BookingCreatedEvent':
        return cls(
            aggregate_id=booking.id,
            booking_id=booking.id,
            reference=booking.reference.value,
            package_id=booking.package_id,
            parent_email=booking.parent_guardian.email,
            participant_count=len(booking.participants),
            total_hours=booking.total_hours,
            total_price=booking.total_price,
            created_at=booking.created_at,
        )


@dataclass(frozen=True, kw_only=True)
class BookingConfirmedEvent(DomainEvent):
    """
    Event: Booking confirmed (PENDING -> CONFIRMED)

    Triggers:
    - Send booking confirmation to the parent
    - Notify assigned trainers
    - Update analytics
    """
    booking_id: str
    reference: str
    total_price: Decimal
    paid_amount: Decimal
    schedule_count: int
    confirmed_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> 'BookingConfirmedEvent':
        return cls(
            aggregate_id=booking.id,
            booking_id=booking.id,
            reference=booking.reference.value,
            total_price=booking.total_price,
            paid_amount=booking.paid_amount,
            schedule_count=len(booking.schedules),
            confirmed_at=booking.updated_at,
        )


@dataclass(frozen=True, kw_only=True)
class BookingCancelledEvent(DomainEvent):
    """
    Event: Booking was cancelled

    Triggers:
    - Process refund (if applicable)
    - Notify parent and trainers
    - Free up session slots
    """
    booking_id: str
    reference: str
    cancellation_reason: str
    cancelled_at: datetime
    paid_amount: Decimal

    @classmethod
    def from_booking(cls, booking: Booking) -> 'BookingCancelledEvent':
        if not booking.cancellation_reason or booking.cancelled_at is None:
            raise IntegrityViolation(
                f"Booking {booking.reference} has no cancellation reason or timestamp"
            )
        return cls(
            aggregate_id=booking.id,
            booking_id=booking.id,
            reference=booking.reference.value,
            cancellation_reason=booking.cancellation_reason,
            cancelled_at=booking.cancelled_at,
            paid_amount=booking.paid_amount,
        )


@dataclass(frozen=True, kw_only=True)
class BookingPaymentRecordedEvent(DomainEvent):
    """
    Event: A payment was applied to the booking

    Triggers:
    - Send payment receipt
    - Remind about the outstanding balance for partial payments
    """
    booking_id: str
    reference: str
    amount: Decimal
    paid_amount: Decimal
    payment_status: str

    @classmethod
    def from_booking(cls, booking: Booking, amount: Decimal) -> 'BookingPaymentRecordedEvent':
        return cls(
            aggregate_id=booking.id,
            booking_id=booking.id,
            reference=booking.reference.value,
            amount=amount,
            paid_amount=booking.paid_amount,
            payment_status=booking.payment_status.value,
        )
