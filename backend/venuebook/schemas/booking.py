# backend/venuebook/schemas/booking.py
"""Booking request and result schemas."""

import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator

from ..models.booking import RecurringType
from ._strict_base import StrictModel, StrictRequestModel

DateType = datetime.date
TimeType = datetime.time
DateTimeType = datetime.datetime


class BookingCreate(StrictRequestModel):
    venue_id: str = Field(min_length=1)
    renter_id: str = Field(min_length=1)
    date: DateType
    start_time: TimeType
    end_time: TimeType
    total_price: Optional[Decimal] = Field(default=None, ge=0)
    recurring_type: RecurringType = RecurringType.NONE
    recurring_end_date: Optional[DateType] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("end_time")
    @classmethod
    def validate_time_order(cls, v: TimeType, info: Any) -> TimeType:
        """Ensure end time is after start time."""
        if (
            isinstance(getattr(info, "data", None), dict)
            and info.data.get("start_time")
            and v <= info.data["start_time"]
        ):
            raise ValueError("End time must be after start time")
        return v

    @model_validator(mode="after")
    def validate_recurrence(self) -> "BookingCreate":
        if self.recurring_end_date is not None and self.recurring_end_date < self.date:
            raise ValueError("recurring_end_date must not be before the booking date")
        return self


class BookingRead(StrictModel):
    id: str
    venue_id: str
    renter_id: str
    date: DateType
    start_time: TimeType
    end_time: TimeType
    status: str
    total_price: Optional[Decimal] = None
    recurring_type: str
    recurring_end_date: Optional[DateType] = None
    parent_booking_id: Optional[str] = None
    payment_id: Optional[str] = None
    cancelled_at: Optional[DateTimeType] = None


class ConflictCheckResult(StrictModel):
    has_conflict: bool
    conflicting_bookings: List[BookingRead] = Field(default_factory=list)


class RefundErrorInfo(StrictModel):
    code: str
    message: str
    retryable: bool


class CancellationResult(StrictModel):
    """Refund decision for a cancellation, consumed by the payment collaborator."""

    booking: BookingRead
    refund_issued: bool
    refund_amount_cents: Optional[int] = None
    refund_id: Optional[str] = None
    hours_until_start: float
    refund_error: Optional[RefundErrorInfo] = None
