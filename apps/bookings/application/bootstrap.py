"""
Wiring for the booking use cases.

`bootstrap()` registers every command handler and the notification
subscribers on a message bus. Commands are then dispatched with
`bus.handle_command(...)`.

The bookings app calls it from `AppConfig.ready()` for the process-wide
bus; calling it again on an already wired bus is a no-op.
"""

import logging

from shared.application.message_bus import MessageBus, message_bus
from apps.bookings.application.command_handlers import (
    AddSchedulesCommand,
    AddSchedulesHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RecordPaymentCommand,
    RecordPaymentHandler,
    SubmitBookingCommand,
    SubmitBookingHandler,
)
from apps.bookings.repositories import BookingRepository, DjangoBookingRepository
from apps.notifications.handlers import subscribe

logger = logging.getLogger(__name__)


def bootstrap(
    bus: MessageBus | None = None,
    booking_repo: BookingRepository | None = None,
) -> MessageBus:
    bus = bus or message_bus
    if bus.has_command_handler(CreateBookingCommand):
        logger.debug("Booking bus already wired")
        return bus
    booking_repo = booking_repo or DjangoBookingRepository()

    handlers = {
        CreateBookingCommand: CreateBookingHandler(booking_repo, bus),
        SubmitBookingCommand: SubmitBookingHandler(booking_repo, bus),
        AddSchedulesCommand: AddSchedulesHandler(booking_repo, bus),
        RecordPaymentCommand: RecordPaymentHandler(booking_repo, bus),
        ConfirmBookingCommand: ConfirmBookingHandler(booking_repo, bus),
        CancelBookingCommand: CancelBookingHandler(booking_repo, bus),
    }
    for command_type, handler in handlers.items():
        bus.register_command_handler(command_type, handler.handle)

    subscribe(bus)
    logger.info(f"Booking bus ready with {len(handlers)} command handlers")
    return bus
