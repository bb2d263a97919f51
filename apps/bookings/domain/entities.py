"""
Booking Domain Entities

Core business entity for the booking domain:
- Booking: Aggregate representing a purchased allocation of care time,
  its participants and its scheduled sessions

The aggregate is immutable. Any change (submission, payment, confirmation,
cancellation) produces a new instance through `evolve()`, which runs the
same invariant checks as `reconstitute()`.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from shared.domain.base import Aggregate
from shared.domain.errors import IntegrityViolation
from shared.domain.value_objects import to_decimal
from apps.bookings.domain.value_objects import (
    BookingReference,
    BookingSchedule,
    BookingStatus,
    ParentGuardian,
    Participant,
    PaymentStatus,
)


@dataclass(frozen=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a parent's purchase of a care package for one or more
    children. This is the main aggregate that enforces booking invariants.

    Key invariants:
    - ID and package ID are required
    - At least one participant
    - At least one schedule, except for drafts, confirmed + paid bookings
      (pay first, book sessions later from the dashboard) and those paid
      bookings once cancelled
    - Total hours greater than zero, total price not negative
    - 0 <= paid amount <= total price
    """

    # Identification
    reference: BookingReference
    package_id: str
    package_slug: str

    # Status tracking
    status: BookingStatus
    payment_status: PaymentStatus

    # People and sessions
    parent_guardian: ParentGuardian
    participants: tuple[Participant, ...]
    schedules: tuple[BookingSchedule, ...]

    # Pricing
    total_hours: float
    total_price: Decimal
    paid_amount: Decimal

    # Timestamps
    created_at: datetime
    updated_at: datetime
    start_date: date | None = None
    notes: str | None = None

    # Cancellation details
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None

    def __post_init__(self):
        if not isinstance(self.reference, BookingReference):
            object.__setattr__(self, 'reference', BookingReference(self.reference))
        object.__setattr__(self, 'status', BookingStatus.parse(self.status))
        object.__setattr__(self, 'payment_status', PaymentStatus.parse(self.payment_status))
        object.__setattr__(self, 'participants', tuple(self.participants or ()))
        object.__setattr__(self, 'schedules', tuple(self.schedules or ()))
        if isinstance(self.start_date, datetime):
            object.__setattr__(self, 'start_date', self.start_date.date())
        try:
            object.__setattr__(self, 'total_price', to_decimal(self.total_price))
            object.__setattr__(self, 'paid_amount', to_decimal(self.paid_amount))
        except ArithmeticError:
            raise IntegrityViolation("Total price and paid amount must be numbers")

        if not self.id or not str(self.id).strip():
            raise IntegrityViolation("Booking ID is required", field='id')
        if not self.package_id or not str(self.package_id).strip():
            raise IntegrityViolation("Package ID is required", field='package_id')
        if not self.participants:
            raise IntegrityViolation("At least one participant is required", field='participants')

        if not self.schedules and not self._may_have_no_schedules():
            raise IntegrityViolation("At least one schedule is required", field='schedules')

        if self.total_hours is None or self.total_hours <= 0:
            raise IntegrityViolation("Total hours must be greater than zero", field='total_hours')
        if self.total_price < 0:
            raise IntegrityViolation("Total price cannot be negative", field='total_price')
        if self.paid_amount < 0 or self.paid_amount > self.total_price:
            raise IntegrityViolation(
                "Paid amount must be between 0 and total price",
                field='paid_amount',
            )

    def _may_have_no_schedules(self) -> bool:
        """
        Pay first, book later: drafts hold a payment intent, confirmed and
        fully paid bookings pick their sessions afterwards, and such a
        booking may still be cancelled (and refunded) before it has any.
        """
        if self.status.is_draft():
            return True
        if self.status.is_confirmed():
            return self.payment_status.is_paid()
        if self.status.is_cancelled():
            return self.payment_status.is_paid() or self.payment_status.is_refunded()
        return False

    @classmethod
    def create(
        cls,
        id: str,
        package_id: str,
        package_slug: str,
        parent_guardian: ParentGuardian,
        participants: Iterable[Participant],
        schedules: Iterable[BookingSchedule],
        total_hours: float,
        total_price,
        start_date: date | None = None,
        notes: str | None = None,
        reference: BookingReference | None = None,
    ) -> 'Booking':
        """
        Create a new booking

        New bookings always start as DRAFT with a PENDING payment and
        nothing paid. A reference is generated unless the caller already
        reserved a unique one.
        """
        now = datetime.now()
        return cls(
            id=id,
            reference=reference or BookingReference.generate(now=now),
            package_id=package_id,
            package_slug=package_slug,
            status=BookingStatus.DRAFT,
            payment_status=PaymentStatus.PENDING,
            parent_guardian=parent_guardian,
            participants=tuple(participants),
            schedules=tuple(schedules),
            total_hours=total_hours,
            total_price=total_price,
            paid_amount=Decimal('0'),
            created_at=now,
            updated_at=now,
            start_date=start_date,
            notes=notes,
        )

    @classmethod
    def reconstitute(
        cls,
        id: str,
        reference: BookingReference,
        package_id: str,
        package_slug: str,
        status: BookingStatus | str,
        payment_status: PaymentStatus | str,
        parent_guardian: ParentGuardian,
        participants: Iterable[Participant],
        schedules: Iterable[BookingSchedule],
        total_hours: float,
        total_price,
        paid_amount,
        created_at: datetime,
        updated_at: datetime,
        start_date: date | None = None,
        notes: str | None = None,
        cancellation_reason: str | None = None,
        cancelled_at: datetime | None = None,
    ) -> 'Booking':
        """
        Rebuild a booking from an external source of truth

        This is the only trusted re-entry point after persistence or
        conflict resolution; every invariant is checked again.
        """
        return cls(
            id=id,
            reference=reference,
            package_id=package_id,
            package_slug=package_slug,
            status=status,
            payment_status=payment_status,
            parent_guardian=parent_guardian,
            participants=tuple(participants),
            schedules=tuple(schedules),
            total_hours=total_hours,
            total_price=total_price,
            paid_amount=paid_amount,
            created_at=created_at,
            updated_at=updated_at,
            start_date=start_date,
            notes=notes,
            cancellation_reason=cancellation_reason,
            cancelled_at=cancelled_at,
        )

    def evolve(self, **changes) -> 'Booking':
        """Return a re-validated copy with the given fields changed"""
        changes.setdefault('updated_at', datetime.now())
        return replace(self, **changes)

    # ===== Queries =====

    def is_fully_paid(self) -> bool:
        # Amount check covers records where status and amount disagree
        return self.payment_status.is_paid() or self.paid_amount >= self.total_price

    def has_outstanding_balance(self) -> bool:
        return self.paid_amount < self.total_price

    def can_be_cancelled(self) -> bool:
        return self.status.can_be_cancelled()

    def can_be_confirmed(self) -> bool:
        """Confirmation always requires full payment"""
        return self.status.can_be_confirmed() and self.payment_status.is_paid()

    def get_remaining_amount(self) -> Decimal:
        return self.total_price - self.paid_amount

    def has_schedules(self) -> bool:
        return bool(self.schedules)

    def __str__(self):
        return f"Booking {self.reference} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, reference={self.reference}, "
            f"status={self.status.value}, payment_status={self.payment_status.value})"
        )
