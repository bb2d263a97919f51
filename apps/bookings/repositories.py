"""Booking repositories.

Repositories are swappable and return domain models. Stored rows are
mapped through the value-object constructors and `Booking.reconstitute`,
so a malformed row surfaces as an IntegrityViolation instead of a
half-built aggregate. Such a failure is a data-integrity problem and is
not retried.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from django.db import transaction  # type: ignore

from apps.bookings import models as orm
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.value_objects import (
    BookingReference,
    BookingSchedule,
    ParentGuardian,
    Participant,
)

logger = logging.getLogger(__name__)


class BookingRepository(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def get_by_id(self, booking_id: str) -> Booking | None:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    def get_by_reference(self, reference: str) -> Booking | None:
        """Return a booking by its reference, or None if not found."""
        ...

    @abstractmethod
    def save(self, booking: Booking) -> None:
        """Insert or replace the stored state of a booking."""
        ...

    @abstractmethod
    def reference_exists(self, reference: str) -> bool:
        """Check if a reference is already taken."""
        ...

    @abstractmethod
    def list_all(self) -> list[Booking]:
        """Return all bookings ordered by created_at descending."""
        ...

    @abstractmethod
    def list_for_parent_email(self, email: str) -> list[Booking]:
        """Return bookings made by a parent, newest first."""
        ...


def _blank_to_none(value: str) -> str | None:
    return value or None


class DjangoBookingRepository(BookingRepository):
    """Relational booking store using Django ORM."""

    def _queryset(self):
        return orm.Booking.objects.prefetch_related("participants", "schedules")

    def get_by_id(self, booking_id: str) -> Booking | None:
        row = self._queryset().filter(pk=booking_id).first()
        return self.to_domain(row) if row else None

    def get_by_reference(self, reference: str) -> Booking | None:
        row = self._queryset().filter(reference=reference).first()
        return self.to_domain(row) if row else None

    def reference_exists(self, reference: str) -> bool:
        return orm.Booking.objects.filter(reference=reference).exists()

    def list_all(self) -> list[Booking]:
        return [self.to_domain(row) for row in self._queryset()]

    def list_for_parent_email(self, email: str) -> list[Booking]:
        rows = self._queryset().filter(parent_email__iexact=email)
        return [self.to_domain(row) for row in rows]

    @transaction.atomic
    def save(self, booking: Booking) -> None:
        parent = booking.parent_guardian
        row, created = orm.Booking.objects.update_or_create(
            pk=booking.id,
            defaults={
                "reference": booking.reference.value,
                "package_id": booking.package_id,
                "package_slug": booking.package_slug,
                "status": booking.status.value,
                "payment_status": booking.payment_status.value,
                "parent_first_name": parent.first_name,
                "parent_last_name": parent.last_name,
                "parent_email": parent.email,
                "parent_phone": parent.phone,
                "parent_address": parent.address or "",
                "parent_emergency_contact": parent.emergency_contact or "",
                "total_hours": booking.total_hours,
                "total_price": booking.total_price,
                "paid_amount": booking.paid_amount,
                "start_date": booking.start_date,
                "notes": booking.notes or "",
                "cancellation_reason": booking.cancellation_reason or "",
                "cancelled_at": booking.cancelled_at,
                "created_at": booking.created_at,
                "updated_at": booking.updated_at,
            },
        )

        # Children are owned by the aggregate: replace them wholesale
        row.participants.all().delete()
        row.schedules.all().delete()
        orm.BookingParticipant.objects.bulk_create(
            orm.BookingParticipant(
                booking=row,
                position=position,
                first_name=participant.first_name,
                last_name=participant.last_name,
                date_of_birth=participant.date_of_birth,
                medical_info=participant.medical_info or "",
                special_needs=participant.special_needs or "",
            )
            for position, participant in enumerate(booking.participants)
        )
        orm.BookingSchedule.objects.bulk_create(
            orm.BookingSchedule(
                booking=row,
                date=schedule.date,
                start_time=schedule.start_time,
                end_time=schedule.end_time,
                trainer_id=schedule.trainer_id or "",
                activity_id=schedule.activity_id or "",
            )
            for schedule in booking.schedules
        )

        logger.debug(
            f"{'Inserted' if created else 'Updated'} booking {booking.reference} "
            f"(status={booking.status.value}, payment={booking.payment_status.value})"
        )

    @staticmethod
    def to_domain(row: orm.Booking) -> Booking:
        """Map a stored row and its children back into the aggregate."""
        parent = ParentGuardian(
            first_name=row.parent_first_name,
            last_name=row.parent_last_name,
            email=row.parent_email,
            phone=row.parent_phone,
            address=_blank_to_none(row.parent_address),
            emergency_contact=_blank_to_none(row.parent_emergency_contact),
        )
        participants = [
            Participant(
                first_name=p.first_name,
                last_name=p.last_name,
                date_of_birth=p.date_of_birth,
                medical_info=_blank_to_none(p.medical_info),
                special_needs=_blank_to_none(p.special_needs),
            )
            for p in row.participants.all()
        ]
        # Stored sessions may lie in the past (completed bookings)
        schedules = [
            BookingSchedule(
                date=s.date,
                start_time=s.start_time,
                end_time=s.end_time,
                trainer_id=_blank_to_none(s.trainer_id),
                activity_id=_blank_to_none(s.activity_id),
                allow_past=True,
            )
            for s in row.schedules.all()
        ]
        return Booking.reconstitute(
            id=row.id,
            reference=BookingReference(row.reference),
            package_id=row.package_id,
            package_slug=row.package_slug,
            status=row.status,
            payment_status=row.payment_status,
            parent_guardian=parent,
            participants=participants,
            schedules=schedules,
            total_hours=row.total_hours,
            total_price=row.total_price,
            paid_amount=row.paid_amount,
            created_at=row.created_at,
            updated_at=row.updated_at,
            start_date=row.start_date,
            notes=_blank_to_none(row.notes),
            cancellation_reason=_blank_to_none(row.cancellation_reason),
            cancelled_at=row.cancelled_at,
        )
