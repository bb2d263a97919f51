"""Celery tasks for the notification collaborator."""

from __future__ import annotations

from typing import Any

import structlog
from celery import shared_task  # type: ignore

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.dispatch_booking_event")
def dispatch_booking_event(payload: dict[str, Any]) -> str:
    """Hand a booking event snapshot to the delivery channels.

    Channels (email, SMS, analytics sinks) are configured outside this
    project; the task only records that the snapshot left the core.
    """
    event_type = payload.get("event_type", "unknown")
    logger.info(
        "booking_event.dispatched",
        event_type=event_type,
        event_id=payload.get("event_id"),
        booking_id=payload.get("booking_id"),
        reference=payload.get("reference"),
    )
    return event_type
