"""Message bus subscribers that forward booking events to Celery."""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent
from apps.bookings.domain.events import (
    BookingCancelledEvent,
    BookingConfirmedEvent,
    BookingCreatedEvent,
    BookingPaymentRecordedEvent,
)
from apps.notifications.tasks import dispatch_booking_event

logger = logging.getLogger(__name__)

BOOKING_EVENTS = (
    BookingCreatedEvent,
    BookingConfirmedEvent,
    BookingCancelledEvent,
    BookingPaymentRecordedEvent,
)


def enqueue_booking_event(event: DomainEvent) -> None:
    """Queue the event snapshot for asynchronous delivery."""
    dispatch_booking_event.delay(event.to_dict())
    logger.info(f"Queued {event.event_type} for booking {event.aggregate_id}")


def subscribe(bus: MessageBus) -> None:
    for event_type in BOOKING_EVENTS:
        bus.register_event_handler(event_type, enqueue_booking_event)
