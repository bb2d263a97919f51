"""Unit tests for the shared kernel.

Run with: pytest shared/tests -v
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import pytest

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent
from shared.domain.errors import ErrorCode, IntegrityViolation
from shared.domain.value_objects import Percentage, TimeRange


@dataclass(frozen=True, kw_only=True)
class SomethingHappened(DomainEvent):
    amount: Decimal
    happened_at: datetime


class TestTimeRange:
    def test_rejects_empty_or_inverted_range(self):
        start = datetime(2026, 11, 2, 10, 0)
        with pytest.raises(IntegrityViolation):
            TimeRange(start, start)

    def test_overlapping_ranges(self):
        a = TimeRange(datetime(2026, 11, 2, 10, 0), datetime(2026, 11, 2, 11, 0))
        b = TimeRange(datetime(2026, 11, 2, 10, 30), datetime(2026, 11, 2, 11, 30))
        assert a.overlaps_with(b)
        assert b.overlaps_with(a)

    def test_adjacent_ranges_do_not_overlap(self):
        a = TimeRange(datetime(2026, 11, 2, 10, 0), datetime(2026, 11, 2, 11, 0))
        b = TimeRange(datetime(2026, 11, 2, 11, 0), datetime(2026, 11, 2, 12, 0))
        assert not a.overlaps_with(b)

    def test_duration_in_minutes(self):
        r = TimeRange(datetime(2026, 11, 2, 9, 15), datetime(2026, 11, 2, 10, 45))
        assert r.duration_minutes == 90


class TestPercentage:
    @pytest.mark.parametrize("value", [0, 12.5, "100"])
    def test_accepts_values_in_range(self, value):
        assert Percentage(value).value == Decimal(str(value))

    @pytest.mark.parametrize("value", [-1, 100.01, "abc"])
    def test_rejects_values_out_of_range(self, value):
        with pytest.raises(IntegrityViolation) as exc:
            Percentage(value)
        assert exc.value.code is ErrorCode.INTEGRITY_VIOLATION

    def test_of_amount(self):
        assert Percentage(30).of(100) == Decimal("30")


class TestDomainEvent:
    def test_to_dict_is_flat_and_json_safe(self):
        event = SomethingHappened(
            aggregate_id="agg-1",
            amount=Decimal("12.50"),
            happened_at=datetime(2026, 11, 2, 10, 0),
        )
        payload = event.to_dict()

        assert payload["event_type"] == "SomethingHappened"
        assert payload["aggregate_id"] == "agg-1"
        assert payload["amount"] == "12.50"
        assert payload["happened_at"] == "2026-11-02T10:00:00"
        assert payload["event_id"] == str(event.event_id)


class TestMessageBus:
    def test_publishes_to_every_handler_in_order(self):
        bus = MessageBus()
        received = []
        bus.register_event_handler(SomethingHappened, lambda e: received.append(("first", e)))
        bus.register_event_handler(SomethingHappened, lambda e: received.append(("second", e)))

        event = SomethingHappened(amount=Decimal("1"), happened_at=datetime.now())
        bus.publish_events([event])

        assert received == [("first", event), ("second", event)]

    def test_failing_handler_does_not_stop_others(self):
        bus = MessageBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.register_event_handler(SomethingHappened, broken)
        bus.register_event_handler(SomethingHappened, received.append)

        event = SomethingHappened(amount=Decimal("1"), happened_at=datetime.now())
        bus.publish_events([event])

        assert received == [event]

    def test_publish_reports_failure_count(self):
        bus = MessageBus()

        def broken(event):
            raise RuntimeError("boom")

        bus.register_event_handler(SomethingHappened, broken)
        bus.register_event_handler(SomethingHappened, lambda e: None)

        events = [SomethingHappened(amount=Decimal(n), happened_at=datetime.now()) for n in "12"]
        assert bus.publish_events(events) == 2

    def test_base_class_subscribers_see_every_event(self):
        bus = MessageBus()
        specific, catch_all = [], []
        bus.register_event_handler(DomainEvent, catch_all.append)
        bus.register_event_handler(SomethingHappened, specific.append)

        event = SomethingHappened(amount=Decimal("1"), happened_at=datetime.now())
        assert bus.publish_events([event]) == 0

        assert specific == [event]
        assert catch_all == [event]
        assert bus.subscribers_for(SomethingHappened) == [specific.append, catch_all.append]

    def test_event_without_handlers_is_ignored(self):
        event = SomethingHappened(amount=Decimal("1"), happened_at=datetime.now())
        assert MessageBus().publish_events([event]) == 0

    def test_has_command_handler(self):
        bus = MessageBus()
        assert not bus.has_command_handler(str)
        bus.register_command_handler(str, len)
        assert bus.has_command_handler(str)
        assert not bus.has_command_handler(bytes)

    def test_command_handler_is_unique(self):
        bus = MessageBus()
        bus.register_command_handler(str, len)
        with pytest.raises(ValueError):
            bus.register_command_handler(str, len)

    def test_handle_command_returns_result(self):
        bus = MessageBus()
        bus.register_command_handler(str, len)
        assert bus.handle_command("abcd") == 4

    def test_handle_command_without_handler(self):
        with pytest.raises(ValueError):
            MessageBus().handle_command(42)

    def test_command_errors_propagate(self):
        bus = MessageBus()

        def fail(command):
            raise IntegrityViolation("bad data")

        bus.register_command_handler(int, fail)
        with pytest.raises(IntegrityViolation):
            bus.handle_command(1)

    def test_clear_drops_registrations(self):
        bus = MessageBus()
        bus.register_command_handler(str, len)
        bus.clear()
        with pytest.raises(ValueError):
            bus.handle_command("x")
