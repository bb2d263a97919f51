"""Persistence models for bookings.

These rows mirror the Booking aggregate field for field. Business rules
live in `apps.bookings.domain`; rows are always turned back into domain
objects through `Booking.reconstitute` by the repository.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """Stored state of a care package booking."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PARTIAL = "partial", _("Partially paid")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")
        FAILED = "failed", _("Failed")

    id = models.CharField(primary_key=True, max_length=64)
    reference = models.CharField(max_length=32, unique=True)
    package_id = models.CharField(max_length=64)
    package_slug = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    parent_first_name = models.CharField(max_length=150)
    parent_last_name = models.CharField(max_length=150)
    parent_email = models.EmailField()
    parent_phone = models.CharField(max_length=32)
    parent_address = models.TextField(blank=True)
    parent_emergency_contact = models.CharField(max_length=255, blank=True)

    total_hours = models.FloatField()
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    start_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="bookings_bo_status_idx"),
            models.Index(fields=["parent_email"], name="bookings_bo_parent_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.reference} ({self.status})"


class BookingParticipant(models.Model):
    """A child enrolled under a booking."""

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="participants",
    )
    position = models.PositiveSmallIntegerField(default=0)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    date_of_birth = models.DateField()
    medical_info = models.TextField(blank=True)
    special_needs = models.TextField(blank=True)

    class Meta:
        ordering = ["position"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class BookingSchedule(models.Model):
    """A session slot belonging to a booking."""

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="schedules",
    )
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    trainer_id = models.CharField(max_length=64, blank=True)
    activity_id = models.CharField(max_length=64, blank=True)

    class Meta:
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["date", "start_time"], name="bookings_sc_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.date} {self.start_time}-{self.end_time}"
