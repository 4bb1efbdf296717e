# backend/venuebook/models/availability.py
"""
Base-schedule models for venues.

A venue's bookable base schedule comes from exactly one source, chosen by
``VenueScheduleConfig.regular_schedule_mode``:

- ``legacy``: hand-authored ``AvailabilityBlock`` rows, one per date.
- ``template``: ``SlotInstance`` rows materialized from ``SlotTemplate``
  rules by the template sync queue. Instances are disposable and
  regenerable; they are never a record of past bookings.
"""

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class ScheduleMode(str, Enum):
    LEGACY = "legacy"
    TEMPLATE = "template"


class SlotActionType(str, Enum):
    INSTANT_BOOK = "instant_book"
    REQUEST_PRIVATE = "request_private"
    DROP_IN = "drop_in"


class VenueScheduleConfig(Base):
    """Per-venue scheduling switches."""

    __tablename__ = "venue_schedule_configs"

    venue_id = Column(String(64), primary_key=True)
    regular_schedule_mode = Column(String(20), nullable=False, default=ScheduleMode.LEGACY.value)
    drop_in_enabled = Column(Boolean, nullable=False, default=False)
    drop_in_price = Column(Numeric(10, 2), nullable=True)
    timezone = Column(String(64), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AvailabilityBlock(Base):
    """Legacy explicit availability row."""

    __tablename__ = "availability"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    venue_id = Column(String(64), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_availability_venue_date", "venue_id", "date"),)

    def __repr__(self) -> str:
        return f"<AvailabilityBlock {self.venue_id} {self.date} {self.start_time}-{self.end_time}>"


class SlotTemplate(Base):
    """
    Recurring availability rule.

    ``day_of_week`` uses 0=Sunday .. 6=Saturday. The template applies on
    matching weekdays every ``repeat_every_weeks`` weeks, counted from the
    week of ``effective_from`` (or every matching week when unset).
    """

    __tablename__ = "slot_templates"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    venue_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    action_type = Column(String(30), nullable=False, default=SlotActionType.INSTANT_BOOK.value)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    repeat_every_weeks = Column(Integer, nullable=False, default=1)
    effective_from = Column(Date, nullable=True)
    effective_until = Column(Date, nullable=True)
    is_enabled = Column(Boolean, nullable=False, default=True)
    drop_in_price = Column(Numeric(10, 2), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_slot_templates_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_slot_templates_time_order"),
        CheckConstraint("repeat_every_weeks >= 1", name="ck_slot_templates_repeat"),
    )


class SlotInstance(Base):
    """Concrete dated slot produced from a SlotTemplate."""

    __tablename__ = "slot_instances"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    venue_id = Column(String(64), nullable=False)
    template_id = Column(String(26), ForeignKey("slot_templates.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    action_type = Column(String(30), nullable=False)
    drop_in_price = Column(Numeric(10, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    template = relationship("SlotTemplate")

    __table_args__ = (
        UniqueConstraint(
            "venue_id",
            "template_id",
            "date",
            "start_time",
            "end_time",
            name="uq_slot_instances_natural_key",
        ),
        Index("idx_slot_instances_venue_date", "venue_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<SlotInstance {self.venue_id} {self.date} {self.start_time}-{self.end_time} {self.action_type}>"
