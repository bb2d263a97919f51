"""
Unit of Work

One database transaction per use case. Events queued while it is open
reach the message bus only once the outermost transaction has committed,
so subscribers never hear about a booking state that was rolled back.
"""

from abc import ABC, abstractmethod
import logging

from django.db import transaction  # type: ignore

from shared.application.message_bus import MessageBus, message_bus
from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Commits on a clean exit, rolls back when the block raises"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        ...

    @abstractmethod
    def rollback(self):
        ...

    @abstractmethod
    def add_event(self, event: DomainEvent):
        """Queue an event for publication after commit"""
        ...


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Unit of work backed by `transaction.atomic()`

    Usage:
        with DjangoUnitOfWork(bus) as uow:
            confirmed = booking.evolve(status=BookingStatus.CONFIRMED)
            booking_repo.save(confirmed)
            uow.add_event(BookingConfirmedEvent.from_booking(confirmed))
    """

    def __init__(self, bus: MessageBus | None = None):
        self._bus = bus
        self._pending: list[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
            self._atomic = None

    def add_event(self, event: DomainEvent):
        self._pending.append(event)
        logger.debug(f"Queued {event.event_type} for aggregate {event.aggregate_id}")

    def commit(self):
        events, self._pending = self._pending, []
        if events:
            # Runs after the outermost atomic block commits, never on rollback
            transaction.on_commit(lambda: self._publish(events))

    def rollback(self):
        if self._pending:
            logger.warning(f"Rolled back, discarding {len(self._pending)} queued event(s)")
        self._pending = []

    def _publish(self, events: list[DomainEvent]):
        bus = self._bus or message_bus
        failures = bus.publish_events(events)
        if failures:
            logger.error(f"{failures} subscriber failure(s) while publishing {len(events)} event(s)")
