"""
Message Bus

Publish/subscribe boundary between the booking core and its
collaborators (notifications, analytics). Use cases are dispatched as
commands; the events they produce are handed to every subscriber after
the surrounding transaction commits.

Subscribers are matched on the event class and its bases, so a handler
registered for `DomainEvent` sees every event.
"""

from typing import Any, Callable, Iterable, Protocol, TypeVar
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

E = TypeVar('E', bound=DomainEvent, contravariant=True)


class EventSubscriber(Protocol[E]):
    """Anything callable with one event; its return value is ignored"""

    def __call__(self, event: E) -> None: ...


CommandHandler = Callable[[Any], Any]


class MessageBus:
    """
    Commands: exactly one handler per command class, its result is returned
    Events: any number of subscribers, called synchronously in the order
    they subscribed; one failing subscriber never stops the others
    """

    def __init__(self):
        self._subscribers: dict[type[DomainEvent], list[EventSubscriber]] = {}
        self._command_handlers: dict[type, CommandHandler] = {}

    # ===== Registration =====

    def register_event_handler(self, event_type: type[DomainEvent], handler: EventSubscriber):
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed {_name_of(handler)} to {event_type.__name__}")

    def register_command_handler(self, command_type: type, handler: CommandHandler):
        if command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._command_handlers[command_type] = handler
        logger.debug(f"Routed {command_type.__name__} to {_name_of(handler)}")

    def has_command_handler(self, command_type: type) -> bool:
        return command_type in self._command_handlers

    def subscribers_for(self, event_type: type[DomainEvent]) -> list[EventSubscriber]:
        """Subscribers of the class and its bases, most specific class first"""
        found = []
        for klass in event_type.__mro__:
            found.extend(self._subscribers.get(klass, ()))
        return found

    def clear(self):
        self._subscribers.clear()
        self._command_handlers.clear()

    # ===== Dispatch =====

    def handle_command(self, command: Any) -> Any:
        """Run the command's handler and return its result; errors propagate"""
        command_type = type(command)
        handler = self._command_handlers.get(command_type)
        if handler is None:
            raise ValueError(f"No handler registered for command {command_type.__name__}")

        logger.info(f"Handling command: {command_type.__name__}")
        try:
            return handler(command)
        except Exception as e:
            logger.error(f"Command {command_type.__name__} failed: {e}")
            raise

    def publish_events(self, events: Iterable[DomainEvent]) -> int:
        """
        Deliver each event to its subscribers

        Returns the number of subscriber failures; failures are logged
        with their traceback and never raised to the publisher.
        """
        failures = 0
        for event in events:
            subscribers = self.subscribers_for(type(event))
            if not subscribers:
                logger.warning(f"No subscribers for {event.event_type}, event {event.event_id} dropped")
                continue

            logger.info(f"Publishing {event.event_type} (ID: {event.event_id}) to {len(subscribers)} subscriber(s)")
            for subscriber in subscribers:
                try:
                    subscriber(event)
                except Exception as e:
                    failures += 1
                    logger.error(
                        f"Subscriber {_name_of(subscriber)} failed on {event.event_type}: {e}",
                        exc_info=True,
                    )
        return failures


def _name_of(handler: Callable) -> str:
    return getattr(handler, '__qualname__', None) or repr(handler)


# Process-wide bus, wired by the bookings app at startup
message_bus = MessageBus()
