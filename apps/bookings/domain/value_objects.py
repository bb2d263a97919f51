"""
Booking Value Objects

Immutable building blocks composed by the Booking aggregate:
- BookingReference: Opaque human-facing booking token
- Participant: A child enrolled under a booking
- BookingSchedule: One dated, timed session slot
- ParentGuardian: The adult responsible for a booking
- BookingStatus / PaymentStatus: The two independent state machines

Every value object validates itself at construction and raises
IntegrityViolation for malformed data.
"""

import re
from dataclasses import InitVar, dataclass
from datetime import date, datetime, time
from enum import Enum
from uuid import uuid4

from shared.domain.base import ValueObject
from shared.domain.errors import IntegrityViolation
from shared.domain.value_objects import TimeRange

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _require_text(value: str | None, message: str, field: str) -> None:
    if not value or not value.strip():
        raise IntegrityViolation(message, field=field)


# ===== Identity =====

@dataclass(frozen=True)
class BookingReference(ValueObject):
    """
    Booking reference value object

    Human-readable token (e.g., BK20261017093015A1B2C3) shared with the
    parent and used for lookups.
    """
    value: str

    MIN_LENGTH = 6

    def __post_init__(self):
        _require_text(self.value, "Booking reference is required", 'reference')
        if len(self.value.strip()) < self.MIN_LENGTH:
            raise IntegrityViolation(
                f"Booking reference must be at least {self.MIN_LENGTH} characters",
                field='reference',
            )

    @classmethod
    def generate(cls, prefix: str = 'BK', now: datetime | None = None) -> 'BookingReference':
        """Generate reference: {prefix}{timestamp}{random}"""
        timestamp = (now or datetime.now()).strftime('%Y%m%d%H%M%S')
        random_part = uuid4().hex[:6].upper()
        return cls(f"{prefix}{timestamp}{random_part}")

    def __str__(self):
        return self.value


# ===== People =====

@dataclass(frozen=True)
class Participant(ValueObject):
    """
    Participant value object

    A child attending the booked sessions. Age is always derived from the
    date of birth, never stored.
    """
    first_name: str
    last_name: str
    date_of_birth: date
    medical_info: str | None = None
    special_needs: str | None = None

    def __post_init__(self):
        _require_text(self.first_name, "Participant first name is required", 'first_name')
        _require_text(self.last_name, "Participant last name is required", 'last_name')
        if not isinstance(self.date_of_birth, date):
            raise IntegrityViolation("Participant date of birth is required", field='date_of_birth')
        if self._as_date(self.date_of_birth) >= date.today():
            raise IntegrityViolation("Date of birth must be in the past", field='date_of_birth')

    @staticmethod
    def _as_date(value: date) -> date:
        return value.date() if isinstance(value, datetime) else value

    def age(self, on: date | None = None) -> int:
        """Whole years between date of birth and `on` (defaults to today)"""
        today = on or date.today()
        born = self._as_date(self.date_of_birth)
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return years

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class ParentGuardian(ValueObject):
    """Parent or guardian responsible for the booking and its participants"""
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str | None = None
    emergency_contact: str | None = None

    def __post_init__(self):
        _require_text(self.first_name, "Parent first name is required", 'first_name')
        _require_text(self.last_name, "Parent last name is required", 'last_name')
        if not self.email or not EMAIL_PATTERN.match(self.email):
            raise IntegrityViolation("Valid email address is required", field='email')
        _require_text(self.phone, "Phone number is required", 'phone')

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ===== Scheduling =====

@dataclass(frozen=True)
class BookingSchedule(ValueObject):
    """
    Booking schedule value object

    One session slot on a single calendar day. Sessions never cross
    midnight: end_time must be later than start_time on the same date.

    `allow_past` is only meant for rehydrating historical records; new
    schedules cannot be placed before today.
    """
    date: date
    start_time: time
    end_time: time
    trainer_id: str | None = None
    activity_id: str | None = None
    allow_past: InitVar[bool] = False

    TIME_FORMATS = ('%H:%M', '%H:%M:%S')

    def __post_init__(self, allow_past: bool):
        if not isinstance(self.date, date):
            raise IntegrityViolation("Schedule date is required", field='date')
        if not isinstance(self.start_time, time):
            raise IntegrityViolation("Schedule start time is required", field='start_time')
        if not isinstance(self.end_time, time):
            raise IntegrityViolation("Schedule end time is required", field='end_time')
        if not allow_past and self.date < date.today():
            raise IntegrityViolation("Schedule date cannot be in the past", field='date')
        if self.end_time <= self.start_time:
            raise IntegrityViolation(
                "Schedule end time must be after start time on the same day",
                field='end_time',
            )

    @classmethod
    def parse_time(cls, value: str) -> time:
        for fmt in cls.TIME_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
        raise IntegrityViolation(f"Invalid time value: {value!r}", field='time')

    @classmethod
    def from_strings(
        cls,
        day: date | str,
        start_time: str,
        end_time: str,
        trainer_id: str | None = None,
        activity_id: str | None = None,
        allow_past: bool = False,
    ) -> 'BookingSchedule':
        """Build a schedule from ISO date and HH:MM strings"""
        if isinstance(day, str):
            try:
                day = date.fromisoformat(day)
            except ValueError:
                raise IntegrityViolation(f"Invalid schedule date: {day!r}", field='date')
        if not start_time or not end_time:
            raise IntegrityViolation("Schedule start and end times are required", field='time')
        return cls(
            date=day,
            start_time=cls.parse_time(start_time),
            end_time=cls.parse_time(end_time),
            trainer_id=trainer_id,
            activity_id=activity_id,
            allow_past=allow_past,
        )

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.starts_at, self.ends_at)

    def get_duration(self) -> float:
        """Duration in minutes"""
        return (self.ends_at - self.starts_at).total_seconds() / 60

    @property
    def duration_hours(self) -> float:
        return self.get_duration() / 60

    def conflicts_with(self, other: 'BookingSchedule') -> bool:
        """
        Check if two sessions overlap

        Only sessions on the same calendar date can conflict. Back-to-back
        sessions (one ends when the other starts) do not conflict.
        """
        if self.date != other.date:
            return False
        return self.time_range.overlaps_with(other.time_range)

    def __str__(self):
        return f"{self.date.isoformat()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


# ===== Status state machines =====

class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - DRAFT -> PENDING (booking submitted)
    - DRAFT -> CONFIRMED (paid in full before any session is booked)
    - PENDING -> CONFIRMED (fully paid and confirmed)
    - PENDING -> CANCELLED
    - CONFIRMED -> CANCELLED
    - CONFIRMED -> COMPLETED (all sessions delivered)
    """
    DRAFT = 'draft'             # Holds a payment intent, no commitment yet
    PENDING = 'pending'         # Submitted, awaiting payment/confirmation
    CONFIRMED = 'confirmed'     # Paid and confirmed
    CANCELLED = 'cancelled'     # Terminal
    COMPLETED = 'completed'     # Terminal

    @classmethod
    def parse(cls, value: 'str | BookingStatus') -> 'BookingStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise IntegrityViolation(f"Invalid booking status: {value!r}", field='status')

    def is_draft(self) -> bool:
        return self is BookingStatus.DRAFT

    def is_pending(self) -> bool:
        return self is BookingStatus.PENDING

    def is_confirmed(self) -> bool:
        return self is BookingStatus.CONFIRMED

    def is_cancelled(self) -> bool:
        return self is BookingStatus.CANCELLED

    def is_completed(self) -> bool:
        return self is BookingStatus.COMPLETED

    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.COMPLETED)

    def can_be_cancelled(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    def can_be_confirmed(self) -> bool:
        return self is BookingStatus.PENDING

    def can_be_completed(self) -> bool:
        return self is BookingStatus.CONFIRMED

    def can_transition_to(self, target: 'BookingStatus') -> bool:
        return target in _BOOKING_TRANSITIONS[self]


_BOOKING_TRANSITIONS = {
    BookingStatus.DRAFT: {BookingStatus.PENDING, BookingStatus.CONFIRMED},
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}


class PaymentStatus(Enum):
    """
    Payment Status Finite State Machine

    State transitions:
    - PENDING -> PARTIAL -> PAID
    - PENDING -> PAID (paid in one go)
    - PENDING / PARTIAL -> FAILED
    - PAID -> REFUNDED
    """
    PENDING = 'pending'     # Nothing paid yet
    PARTIAL = 'partial'     # Deposit or instalment received
    PAID = 'paid'           # Fully paid
    REFUNDED = 'refunded'   # Money returned after cancellation
    FAILED = 'failed'       # Payment attempt failed

    @classmethod
    def parse(cls, value: 'str | PaymentStatus') -> 'PaymentStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise IntegrityViolation(f"Invalid payment status: {value!r}", field='payment_status')

    def is_pending(self) -> bool:
        return self is PaymentStatus.PENDING

    def is_partial(self) -> bool:
        return self is PaymentStatus.PARTIAL

    def is_paid(self) -> bool:
        return self is PaymentStatus.PAID

    def is_refunded(self) -> bool:
        return self is PaymentStatus.REFUNDED

    def is_failed(self) -> bool:
        return self is PaymentStatus.FAILED

    def can_process_payment(self) -> bool:
        return self in (PaymentStatus.PENDING, PaymentStatus.PARTIAL)

    def can_transition_to(self, target: 'PaymentStatus') -> bool:
        return target in _PAYMENT_TRANSITIONS[self]


_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PARTIAL, PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PARTIAL: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
    PaymentStatus.FAILED: set(),
}
