"""
Booking Policies

Stateless rule providers. Every predicate returns a plain value and never
raises for a business-rule failure:
- BookingPolicy: lifecycle permissions
- AvailabilityPolicy: capacity and notice-window rules
- PricingPolicy: discount eligibility and amounts
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from shared.domain.value_objects import Percentage, to_decimal
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.value_objects import BookingSchedule, BookingStatus


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


class BookingPolicy:
    """Lifecycle permissions for a booking"""

    CANCELLATION_DEADLINE_DAYS = 7

    @staticmethod
    def can_edit(booking: Booking) -> bool:
        return booking.status in (BookingStatus.DRAFT, BookingStatus.PENDING)

    @classmethod
    def allows_modifications(cls, booking: Booking) -> bool:
        return cls.can_edit(booking)

    @staticmethod
    def can_delete(booking: Booking) -> bool:
        return booking.status.is_draft()

    @staticmethod
    def requires_payment(booking: Booking) -> bool:
        return booking.total_price > 0

    @staticmethod
    def can_auto_confirm(booking: Booking) -> bool:
        return (
            booking.status.is_pending()
            and booking.is_fully_paid()
            and booking.has_schedules()
        )

    @staticmethod
    def can_be_refunded(booking: Booking) -> bool:
        has_payment = booking.payment_status.is_paid() or booking.payment_status.is_partial()
        return has_payment and booking.can_be_cancelled()

    @classmethod
    def is_within_cancellation_deadline(cls, booking: Booking, now: datetime | None = None) -> bool:
        """True while now is on or before start date minus the deadline"""
        if booking.start_date is None:
            return False
        deadline = datetime.combine(booking.start_date, datetime.min.time()) - timedelta(
            days=cls.CANCELLATION_DEADLINE_DAYS
        )
        return (now or datetime.now()) <= deadline


class AvailabilityPolicy:
    """Capacity and booking-window rules for session slots"""

    MAX_PARTICIPANTS_PER_SESSION = 10
    MIN_NOTICE_HOURS = 24
    MAX_ADVANCE_DAYS = 90

    @classmethod
    def has_capacity(cls, participant_count: int) -> bool:
        return 0 < participant_count <= cls.MAX_PARTICIPANTS_PER_SESSION

    @classmethod
    def is_within_booking_window(cls, schedule: BookingSchedule, now: datetime | None = None) -> bool:
        hours_until_start = (schedule.starts_at - (now or datetime.now())).total_seconds() / 3600
        return cls.MIN_NOTICE_HOURS <= hours_until_start <= cls.MAX_ADVANCE_DAYS * 24

    @classmethod
    def is_date_available(cls, day: date, existing_schedules: Iterable[BookingSchedule]) -> bool:
        booked = sum(1 for schedule in existing_schedules if schedule.date == day)
        return booked < cls.MAX_PARTICIPANTS_PER_SESSION

    @staticmethod
    def get_available_time_slots(
        day: date,
        existing_schedules: Iterable[BookingSchedule],
        all_time_slots: Sequence[str],
    ) -> list[str]:
        """Candidate start times ("HH:MM") not already taken on that date"""
        booked = {
            schedule.start_time.strftime('%H:%M')
            for schedule in existing_schedules
            if schedule.date == day
        }
        return [slot for slot in all_time_slots if slot not in booked]


class PricingPolicy:
    """
    Discount rules

    Three independent sources add up, then the total is capped:
    - Early bird: booked 30+ days before the first session
    - Multi-child: 5% for every child after the first
    - Bulk hours: highest tier reached only (tiers do not stack)
    """

    EARLY_BIRD_DAYS = 30
    EARLY_BIRD_PERCENTAGE = Decimal('10')
    MULTI_CHILD_PERCENTAGE = Decimal('5')
    # (minimum hours, percentage), highest threshold first
    BULK_HOURS_TIERS = (
        (30, Decimal('15')),
        (20, Decimal('10')),
        (10, Decimal('5')),
    )
    MAX_DISCOUNT_PERCENTAGE = Decimal('50')

    @classmethod
    def is_early_bird(cls, booking_date: date | datetime, start_date: date | datetime) -> bool:
        return (_as_date(start_date) - _as_date(booking_date)).days >= cls.EARLY_BIRD_DAYS

    @classmethod
    def early_bird_discount(cls, base_price, booking_date, start_date) -> Decimal:
        if not cls.is_early_bird(booking_date, start_date):
            return Decimal('0')
        return Percentage(cls.EARLY_BIRD_PERCENTAGE).of(base_price)

    @classmethod
    def multi_child_percentage(cls, number_of_children: int) -> Decimal:
        if number_of_children <= 1:
            return Decimal('0')
        return cls.MULTI_CHILD_PERCENTAGE * (number_of_children - 1)

    @classmethod
    def multi_child_discount(cls, base_price, number_of_children: int) -> Decimal:
        return to_decimal(base_price) * cls.multi_child_percentage(number_of_children) / 100

    @classmethod
    def bulk_hours_percentage(cls, total_hours: float) -> Decimal:
        for threshold, percentage in cls.BULK_HOURS_TIERS:
            if total_hours >= threshold:
                return percentage
        return Decimal('0')

    @classmethod
    def bulk_hours_discount(cls, base_price, total_hours: float) -> Decimal:
        return Percentage(cls.bulk_hours_percentage(total_hours)).of(base_price)

    @classmethod
    def calculate_total_discount(
        cls,
        base_price,
        booking_date: date | datetime,
        start_date: date | datetime | None,
        number_of_children: int,
        total_hours: float,
    ) -> Decimal:
        """Sum of every applicable discount, capped at 50% of the base price"""
        base_price = to_decimal(base_price)
        discount = cls.multi_child_discount(base_price, number_of_children)
        discount += cls.bulk_hours_discount(base_price, total_hours)
        if start_date is not None:
            discount += cls.early_bird_discount(base_price, booking_date, start_date)

        cap = Percentage(cls.MAX_DISCOUNT_PERCENTAGE).of(base_price)
        return min(discount, cap)
