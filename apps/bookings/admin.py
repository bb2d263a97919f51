"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingParticipant, BookingSchedule


class BookingParticipantInline(admin.TabularInline):
    model = BookingParticipant
    extra = 0


class BookingScheduleInline(admin.TabularInline):
    model = BookingSchedule
    extra = 0


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "package_slug",
        "parent_email",
        "status",
        "payment_status",
        "total_hours",
        "total_price",
        "paid_amount",
        "start_date",
        "created_at",
    )
    list_filter = ("status", "payment_status", "start_date")
    search_fields = ("reference", "parent_email", "parent_last_name", "package_slug")
    # State changes go through the command handlers, never the admin form
    readonly_fields = (
        "id",
        "reference",
        "status",
        "payment_status",
        "total_price",
        "paid_amount",
        "created_at",
        "updated_at",
        "cancelled_at",
    )
    inlines = [BookingParticipantInline, BookingScheduleInline]
