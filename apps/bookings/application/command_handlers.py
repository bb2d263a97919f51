"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Create a new draft booking
- SubmitBookingCommand: Submit a draft for payment (DRAFT -> PENDING)
- AddSchedulesCommand: Book sessions, including after payment
- RecordPaymentCommand: Apply a payment and auto-confirm when possible
- ConfirmBookingCommand: Confirm a fully paid booking
- CancelBookingCommand: Cancel a booking and work out the refund

The aggregate is immutable: every handler loads a booking, derives a new
instance with `evolve()`, saves it and queues the matching event. Events
are published by the unit of work after the transaction commits.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Sequence
from uuid import uuid4
import logging

from django.conf import settings  # type: ignore

from shared.application.message_bus import MessageBus, message_bus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import IntegrityViolation
from shared.domain.value_objects import to_decimal
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.errors import (
    BookingNotFoundError,
    BookingRuleViolation,
    ReferenceGenerationError,
)
from apps.bookings.domain.events import (
    BookingCancelledEvent,
    BookingConfirmedEvent,
    BookingCreatedEvent,
    BookingPaymentRecordedEvent,
)
from apps.bookings.domain.policies import AvailabilityPolicy, BookingPolicy
from apps.bookings.domain.services import BookingCalculator, BookingValidator, ValidationResult
from apps.bookings.domain.value_objects import (
    BookingReference,
    BookingSchedule,
    BookingStatus,
    ParentGuardian,
    Participant,
    PaymentStatus,
)
from apps.bookings.repositories import BookingRepository

logger = logging.getLogger(__name__)

MAX_REFERENCE_ATTEMPTS = 10


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point of the checkout flow. Nested values
    are plain dicts as entered by the parent:
    - parent: first_name, last_name, email, phone, address, emergency_contact
    - participants: first_name, last_name, date_of_birth, medical_info, special_needs
    - schedules: date, start_time, end_time, trainer_id, activity_id
    """
    package_id: str
    package_slug: str
    parent: dict[str, Any]
    participants: list[dict[str, Any]]
    total_price: Decimal
    schedules: list[dict[str, Any]] = field(default_factory=list)
    total_hours: float | None = None
    hourly_rate: Decimal | None = None
    start_date: date | None = None
    notes: str | None = None
    booking_id: str | None = None


@dataclass
class SubmitBookingCommand:
    """Command to submit a draft booking (DRAFT -> PENDING)"""
    booking_id: str


@dataclass
class AddSchedulesCommand:
    """Command to book additional sessions on an existing booking"""
    booking_id: str
    schedules: list[dict[str, Any]]


@dataclass
class RecordPaymentCommand:
    """Command to apply a successful payment to a booking"""
    booking_id: str
    amount: Decimal


@dataclass
class ConfirmBookingCommand:
    """Command to confirm a fully paid booking"""
    booking_id: str


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: str
    reason: str


@dataclass(frozen=True)
class CancellationResult:
    booking: Booking
    refund_amount: Decimal


# ===== Mapping helpers =====

def _as_date(value: date | str | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise IntegrityViolation(f"Invalid date: {value!r}", field='date_of_birth')


def build_parent(data: dict[str, Any]) -> ParentGuardian:
    return ParentGuardian(
        first_name=data.get('first_name', ''),
        last_name=data.get('last_name', ''),
        email=data.get('email', ''),
        phone=data.get('phone', ''),
        address=data.get('address'),
        emergency_contact=data.get('emergency_contact'),
    )


def build_participant(data: dict[str, Any]) -> Participant:
    return Participant(
        first_name=data.get('first_name', ''),
        last_name=data.get('last_name', ''),
        date_of_birth=_as_date(data.get('date_of_birth')),
        medical_info=data.get('medical_info'),
        special_needs=data.get('special_needs'),
    )


def build_schedule(data: dict[str, Any]) -> BookingSchedule:
    return BookingSchedule.from_strings(
        data.get('date'),
        data.get('start_time'),
        data.get('end_time'),
        trainer_id=data.get('trainer_id'),
        activity_id=data.get('activity_id'),
    )


def _ensure(result: ValidationResult) -> None:
    if not result.valid:
        raise BookingRuleViolation.from_result(result)


def _ensure_no_conflicts(
    new_schedules: list[BookingSchedule],
    existing_schedules: Sequence[BookingSchedule] = (),
) -> None:
    """Refuse sessions that overlap a booked one or each other"""
    _ensure(BookingValidator.validate_schedule_conflicts(new_schedules, existing_schedules))
    for index, schedule in enumerate(new_schedules):
        _ensure(BookingValidator.validate_schedule_conflicts([schedule], new_schedules[:index]))


def _ensure_booking_window(schedules: list[BookingSchedule]) -> None:
    for schedule in schedules:
        if not AvailabilityPolicy.is_within_booking_window(schedule):
            raise BookingRuleViolation(
                f"Session {schedule} must start between {AvailabilityPolicy.MIN_NOTICE_HOURS} "
                f"hours and {AvailabilityPolicy.MAX_ADVANCE_DAYS} days from now"
            )


class _BookingHandler:
    """Shared plumbing: repository access and the unit of work"""

    def __init__(self, booking_repo: BookingRepository, bus: MessageBus | None = None):
        self.booking_repo = booking_repo
        self.bus = bus or message_bus

    def _load(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get_by_id(booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    def _unit_of_work(self) -> DjangoUnitOfWork:
        return DjangoUnitOfWork(self.bus)


# ===== Command Handlers =====

class CreateBookingHandler(_BookingHandler):
    """
    Handler for CreateBooking command

    1. Build value objects from the entered values (IntegrityViolation on bad data)
    2. Check capacity and booking window
    3. Issue a unique reference
    4. Create the DRAFT booking, save it, publish BookingCreatedEvent
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        logger.info(
            f"Creating booking for package {command.package_id}, "
            f"{len(command.participants)} participant(s), {len(command.schedules)} session(s)"
        )

        parent = build_parent(command.parent)
        participants = [build_participant(p) for p in command.participants]
        schedules = [build_schedule(s) for s in command.schedules]

        if not AvailabilityPolicy.has_capacity(len(participants)):
            raise BookingRuleViolation(
                f"A session takes at most {AvailabilityPolicy.MAX_PARTICIPANTS_PER_SESSION} participants"
            )
        _ensure_booking_window(schedules)
        _ensure_no_conflicts(schedules)

        total_hours = command.total_hours
        if total_hours is None:
            total_hours = BookingCalculator.calculate_total_hours(schedules)
        total_price = BookingCalculator.calculate_total_price(
            total_hours, command.total_price, command.hourly_rate
        )
        start_date = command.start_date
        if start_date is None and schedules:
            start_date = min(schedule.date for schedule in schedules)

        with self._unit_of_work() as uow:
            booking = Booking.create(
                id=command.booking_id or str(uuid4()),
                package_id=command.package_id,
                package_slug=command.package_slug,
                parent_guardian=parent,
                participants=participants,
                schedules=schedules,
                total_hours=total_hours,
                total_price=total_price,
                start_date=start_date,
                notes=command.notes,
                reference=self._generate_unique_reference(),
            )
            self.booking_repo.save(booking)
            uow.add_event(BookingCreatedEvent.from_booking(booking))

        logger.info(f"Booking created successfully: {booking.reference} (ID: {booking.id})")
        return booking

    def _generate_unique_reference(self) -> BookingReference:
        for _ in range(MAX_REFERENCE_ATTEMPTS):
            reference = BookingReference.generate()
            if not self.booking_repo.reference_exists(reference.value):
                return reference
        raise ReferenceGenerationError(MAX_REFERENCE_ATTEMPTS)


class SubmitBookingHandler(_BookingHandler):
    """Handler for submitting a draft"""

    def handle(self, command: SubmitBookingCommand) -> Booking:
        logger.info(f"Submitting booking {command.booking_id}")

        with self._unit_of_work():
            booking = self._load(command.booking_id)
            if not booking.status.can_transition_to(BookingStatus.PENDING):
                raise BookingRuleViolation(
                    f"Booking cannot be submitted from status {booking.status.value}"
                )
            if not booking.has_schedules():
                raise BookingRuleViolation("Choose at least one session before submitting")

            submitted = booking.evolve(status=BookingStatus.PENDING)
            self.booking_repo.save(submitted)

        logger.info(f"Booking {submitted.reference} submitted")
        return submitted


class AddSchedulesHandler(_BookingHandler):
    """
    Handler for booking sessions

    Also serves the pay first, book later flow: confirmed and paid
    bookings pick their sessions from the dashboard.
    """

    def handle(self, command: AddSchedulesCommand) -> Booking:
        logger.info(f"Adding {len(command.schedules)} session(s) to booking {command.booking_id}")

        new_schedules = [build_schedule(s) for s in command.schedules]

        with self._unit_of_work():
            booking = self._load(command.booking_id)
            if booking.status.is_terminal():
                raise BookingRuleViolation(
                    f"Sessions cannot be added to a {booking.status.value} booking"
                )
            _ensure_booking_window(new_schedules)
            _ensure_no_conflicts(new_schedules, booking.schedules)

            schedules = booking.schedules + tuple(new_schedules)
            start_date = booking.start_date or min(s.date for s in schedules)
            updated = booking.evolve(schedules=schedules, start_date=start_date)
            self.booking_repo.save(updated)

        logger.info(f"Booking {updated.reference} now has {len(updated.schedules)} session(s)")
        return updated


class RecordPaymentHandler(_BookingHandler):
    """
    Handler for applying a payment

    - Partial amounts move the payment to PARTIAL, the full balance to PAID
    - A fully paid DRAFT is confirmed straight away (pay first, book later)
    - A fully paid PENDING booking with sessions is auto-confirmed
    """

    def handle(self, command: RecordPaymentCommand) -> Booking:
        amount = to_decimal(command.amount)
        logger.info(f"Recording payment of {amount} for booking {command.booking_id}")

        with self._unit_of_work() as uow:
            booking = self._load(command.booking_id)
            _ensure(BookingValidator.validate_payment_amount(booking, amount))

            paid_amount = booking.paid_amount + amount
            payment_status = (
                PaymentStatus.PAID if paid_amount >= booking.total_price else PaymentStatus.PARTIAL
            )
            updated = booking.evolve(paid_amount=paid_amount, payment_status=payment_status)
            uow.add_event(BookingPaymentRecordedEvent.from_booking(updated, amount))

            if (
                updated.status.is_draft()
                and updated.is_fully_paid()
                and updated.status.can_transition_to(BookingStatus.CONFIRMED)
            ):
                updated = updated.evolve(status=BookingStatus.CONFIRMED)
                uow.add_event(BookingConfirmedEvent.from_booking(updated))
                logger.info(f"Booking {updated.reference} paid in full from draft, confirmed")
            elif BookingPolicy.can_auto_confirm(updated):
                updated = updated.evolve(status=BookingStatus.CONFIRMED)
                uow.add_event(BookingConfirmedEvent.from_booking(updated))
                logger.info(f"Booking {updated.reference} auto-confirmed")

            self.booking_repo.save(updated)

        logger.info(
            f"Payment recorded for booking {updated.reference}: "
            f"{updated.paid_amount}/{updated.total_price} ({updated.payment_status.value})"
        )
        return updated


class ConfirmBookingHandler(_BookingHandler):
    """Handler for confirming a booking"""

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        logger.info(f"Confirming booking {command.booking_id}")

        with self._unit_of_work() as uow:
            booking = self._load(command.booking_id)
            _ensure(BookingValidator.validate_booking_confirmation(booking))

            confirmed = booking.evolve(status=BookingStatus.CONFIRMED)
            self.booking_repo.save(confirmed)
            uow.add_event(BookingConfirmedEvent.from_booking(confirmed))

        logger.info(f"Booking {confirmed.reference} confirmed successfully")
        return confirmed


class CancelBookingHandler(_BookingHandler):
    """
    Handler for cancelling a booking

    Cancelling on or before the deadline (7 days before the start date)
    is free; later cancellations keep the configured fee.
    """

    def __init__(
        self,
        booking_repo: BookingRepository,
        bus: MessageBus | None = None,
        late_cancellation_fee_percentage=None,
    ):
        super().__init__(booking_repo, bus)
        if late_cancellation_fee_percentage is None:
            late_cancellation_fee_percentage = getattr(
                settings, 'BOOKING_LATE_CANCELLATION_FEE_PERCENTAGE', 0
            )
        self.late_cancellation_fee_percentage = to_decimal(late_cancellation_fee_percentage)

    def handle(self, command: CancelBookingCommand) -> CancellationResult:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with self._unit_of_work() as uow:
            booking = self._load(command.booking_id)
            _ensure(BookingValidator.validate_booking_cancellation(booking))
            if not command.reason or not command.reason.strip():
                raise BookingRuleViolation("A cancellation reason is required")

            refund_amount = self._calculate_refund(booking)
            changes = {
                'status': BookingStatus.CANCELLED,
                'cancellation_reason': command.reason.strip(),
                'cancelled_at': datetime.now(),
            }
            if refund_amount > 0 and booking.payment_status.can_transition_to(PaymentStatus.REFUNDED):
                changes['payment_status'] = PaymentStatus.REFUNDED

            cancelled = booking.evolve(**changes)
            self.booking_repo.save(cancelled)
            uow.add_event(BookingCancelledEvent.from_booking(cancelled))

        logger.info(f"Booking {cancelled.reference} cancelled, refund {refund_amount}")
        return CancellationResult(booking=cancelled, refund_amount=refund_amount)

    def _calculate_refund(self, booking: Booking) -> Decimal:
        if not BookingPolicy.can_be_refunded(booking):
            return Decimal('0')
        fee_percentage = (
            Decimal('0')
            if BookingPolicy.is_within_cancellation_deadline(booking)
            else self.late_cancellation_fee_percentage
        )
        return BookingCalculator.calculate_refund_amount(
            booking.total_price, booking.paid_amount, fee_percentage
        )
