# backend/venuebook/models/booking.py
"""
Booking model for the venue platform.

Bookings are self-contained records: venue, date and wall-clock times are
stored on the row, so a booking stays a commitment regardless of later
changes to templates or legacy availability. Bookings are never deleted;
cancellation is a status transition.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Numeric, String, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RecurringType(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Statuses that occupy the venue's schedule
ACTIVE_BOOKING_STATUSES: FrozenSet[str] = frozenset(
    {BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value}
)

ALLOWED_STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    BookingStatus.PENDING.value: frozenset(
        {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value}
    ),
    BookingStatus.CONFIRMED.value: frozenset(
        {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}
    ),
    BookingStatus.CANCELLED.value: frozenset(),
    BookingStatus.COMPLETED.value: frozenset(),
}


class Booking(Base):
    """A renter's reservation of one venue interval."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    venue_id = Column(String(64), nullable=False, index=True)
    renter_id = Column(String(64), nullable=False, index=True)

    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_price = Column(Numeric(10, 2), nullable=True)

    recurring_type = Column(String(20), nullable=False, default=RecurringType.NONE.value)
    recurring_end_date = Column(Date, nullable=True)
    parent_booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True, index=True)
    payment_id = Column(String(26), nullable=True)

    notes = Column(String(1000), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(64), nullable=True)

    parent = relationship("Booking", remote_side=[id], backref="children")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
        Index("idx_bookings_venue_date_status", "venue_id", "date", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} venue={self.venue_id} {self.date} "
            f"{self.start_time}-{self.end_time} ({self.status})>"
        )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def can_transition_to(self, target: str) -> bool:
        return target in ALLOWED_STATUS_TRANSITIONS.get(self.status, frozenset())

    def confirm(self, at: datetime) -> None:
        self.status = BookingStatus.CONFIRMED.value
        self.confirmed_at = at

    def complete(self, at: datetime) -> None:
        self.status = BookingStatus.COMPLETED.value
        self.completed_at = at

    def cancel(self, cancelled_by_id: str, at: datetime) -> None:
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_by_id = cancelled_by_id
        self.cancelled_at = at
