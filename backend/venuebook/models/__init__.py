"""
Database models for the scheduling engine.

- Booking: reservations and their lifecycle
- Payment: captured payments and refund state
- VenueScheduleConfig / AvailabilityBlock / SlotTemplate / SlotInstance:
  the dual-mode base schedule
- TemplateSyncQueueEntry: materialization work queue
"""

from .availability import (
    AvailabilityBlock,
    ScheduleMode,
    SlotActionType,
    SlotInstance,
    SlotTemplate,
    VenueScheduleConfig,
)
from .booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus, RecurringType
from .payment import Payment, PaymentStatus
from .template_sync import SyncStatus, TemplateSyncQueueEntry

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "AvailabilityBlock",
    "Booking",
    "BookingStatus",
    "Payment",
    "PaymentStatus",
    "RecurringType",
    "ScheduleMode",
    "SlotActionType",
    "SlotInstance",
    "SlotTemplate",
    "SyncStatus",
    "TemplateSyncQueueEntry",
    "VenueScheduleConfig",
]
