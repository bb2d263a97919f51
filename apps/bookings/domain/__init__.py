from apps.bookings.domain.entities import Booking
from apps.bookings.domain.events import (
    BookingCancelledEvent,
    BookingConfirmedEvent,
    BookingCreatedEvent,
    BookingPaymentRecordedEvent,
)
from apps.bookings.domain.policies import AvailabilityPolicy, BookingPolicy, PricingPolicy
from apps.bookings.domain.services import (
    BookingCalculator,
    BookingStatsCalculator,
    BookingValidator,
    ValidationResult,
)
from apps.bookings.domain.value_objects import (
    BookingReference,
    BookingSchedule,
    BookingStatus,
    ParentGuardian,
    Participant,
    PaymentStatus,
)

__all__ = [
    "Booking",
    "BookingReference",
    "BookingSchedule",
    "BookingStatus",
    "ParentGuardian",
    "Participant",
    "PaymentStatus",
    "BookingPolicy",
    "AvailabilityPolicy",
    "PricingPolicy",
    "BookingCalculator",
    "BookingValidator",
    "BookingStatsCalculator",
    "ValidationResult",
    "BookingCreatedEvent",
    "BookingConfirmedEvent",
    "BookingCancelledEvent",
    "BookingPaymentRecordedEvent",
]
