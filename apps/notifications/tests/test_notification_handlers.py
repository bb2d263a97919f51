"""Tests for forwarding booking events to the notification task."""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from apps.bookings.domain.events import (
    BookingCancelledEvent,
    BookingConfirmedEvent,
    BookingCreatedEvent,
    BookingPaymentRecordedEvent,
)
from apps.bookings.domain.value_objects import PaymentStatus
from apps.notifications.handlers import BOOKING_EVENTS, enqueue_booking_event, subscribe
from apps.notifications.tasks import dispatch_booking_event


class TestSubscribe:
    def test_every_booking_event_is_forwarded(self, bus, make_booking):
        subscribe(bus)
        booking = make_booking(payment_status=PaymentStatus.PARTIAL, paid_amount=Decimal("25"))

        with mock.patch("apps.notifications.handlers.dispatch_booking_event") as task:
            bus.publish_events(
                [
                    BookingCreatedEvent.from_booking(booking),
                    BookingPaymentRecordedEvent.from_booking(booking, Decimal("25")),
                ]
            )

        sent = [call.args[0]["event_type"] for call in task.delay.call_args_list]
        assert sent == ["BookingCreatedEvent", "BookingPaymentRecordedEvent"]

    def test_covers_all_booking_events(self):
        assert set(BOOKING_EVENTS) == {
            BookingCreatedEvent,
            BookingConfirmedEvent,
            BookingCancelledEvent,
            BookingPaymentRecordedEvent,
        }

    def test_queue_failure_does_not_reach_publisher(self, bus, make_booking):
        subscribe(bus)
        delivered = []
        bus.register_event_handler(BookingCreatedEvent, delivered.append)
        event = BookingCreatedEvent.from_booking(make_booking())

        with mock.patch("apps.notifications.handlers.dispatch_booking_event") as task:
            task.delay.side_effect = ConnectionError("broker down")
            bus.publish_events([event])

        assert delivered == [event]


class TestEnqueueBookingEvent:
    def test_sends_json_safe_payload(self, make_booking):
        event = BookingCreatedEvent.from_booking(make_booking())

        with mock.patch("apps.notifications.handlers.dispatch_booking_event") as task:
            enqueue_booking_event(event)

        payload = task.delay.call_args.args[0]
        assert payload["event_id"] == str(event.event_id)
        assert payload["total_price"] == "100.00"
        assert payload["reference"] == "BK20260101TEST01"


class TestDispatchBookingEvent:
    def test_returns_event_type(self, make_booking):
        payload = BookingCreatedEvent.from_booking(make_booking()).to_dict()
        assert dispatch_booking_event(payload) == "BookingCreatedEvent"

    def test_runs_as_celery_task(self, make_booking):
        payload = BookingConfirmedEvent.from_booking(make_booking()).to_dict()
        result = dispatch_booking_event.apply(args=[payload])
        assert result.get() == "BookingConfirmedEvent"

    def test_unknown_payload(self):
        assert dispatch_booking_event({}) == "unknown"
