# backend/tests/conftest.py
"""
Pytest configuration for the scheduling engine.

Tests run against an in-memory SQLite database; the environment is pinned
BEFORE any venuebook import so settings never point at a real database or
payment processor.
"""

import os

# CRITICAL: Set test configuration BEFORE any venuebook imports!
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["STRIPE_SECRET_KEY"] = ""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from venuebook.core.clock import FixedClock
from venuebook.database import Base
from venuebook.models import (
    AvailabilityBlock,
    Booking,
    BookingStatus,
    Payment,
    PaymentStatus,
    ScheduleMode,
    SlotActionType,
    SlotInstance,
    SlotTemplate,
    VenueScheduleConfig,
)

VENUE_ID = "venue-1"
RENTER_ID = "renter-1"
VENUE_TZ = "America/New_York"

# Monday 2026-03-02 07:00 in New York
NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    """Session bound to a fresh schema for each test."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


# ============================================================================
# Row factories
# ============================================================================


@pytest.fixture
def make_config(db: Session) -> Callable[..., VenueScheduleConfig]:
    def _make(venue_id: str = VENUE_ID, **overrides: Any) -> VenueScheduleConfig:
        values: dict = {
            "venue_id": venue_id,
            "regular_schedule_mode": ScheduleMode.LEGACY.value,
            "drop_in_enabled": False,
            "timezone": VENUE_TZ,
        }
        values.update(overrides)
        config = VenueScheduleConfig(**values)
        db.add(config)
        db.commit()
        return config

    return _make


@pytest.fixture
def make_booking(db: Session) -> Callable[..., Booking]:
    """Insert a booking row directly, bypassing service validation."""

    def _make(
        on_date: date,
        start: time,
        end: time,
        venue_id: str = VENUE_ID,
        **overrides: Any,
    ) -> Booking:
        values: dict = {
            "venue_id": venue_id,
            "renter_id": RENTER_ID,
            "date": on_date,
            "start_time": start,
            "end_time": end,
            "status": BookingStatus.CONFIRMED.value,
            "total_price": Decimal("50.00"),
            "recurring_type": "none",
        }
        values.update(overrides)
        booking = Booking(**values)
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def make_payment(db: Session) -> Callable[..., Payment]:
    def _make(booking: Booking, amount_cents: int = 4500, **overrides: Any) -> Payment:
        values: dict = {
            "booking_id": booking.id,
            "stripe_payment_intent_id": f"pi_{booking.id}",
            "amount_cents": amount_cents,
            "status": PaymentStatus.PAID.value,
        }
        values.update(overrides)
        payment = Payment(**values)
        db.add(payment)
        db.commit()
        return payment

    return _make


@pytest.fixture
def make_legacy_block(db: Session) -> Callable[..., AvailabilityBlock]:
    def _make(
        on_date: date, start: time, end: time, venue_id: str = VENUE_ID, **overrides: Any
    ) -> AvailabilityBlock:
        block = AvailabilityBlock(
            venue_id=venue_id,
            date=on_date,
            start_time=start,
            end_time=end,
            is_available=overrides.pop("is_available", True),
            **overrides,
        )
        db.add(block)
        db.commit()
        return block

    return _make


@pytest.fixture
def make_template(db: Session) -> Callable[..., SlotTemplate]:
    def _make(
        day_of_week: int, start: time, end: time, venue_id: str = VENUE_ID, **overrides: Any
    ) -> SlotTemplate:
        values: dict = {
            "venue_id": venue_id,
            "day_of_week": day_of_week,
            "start_time": start,
            "end_time": end,
            "action_type": SlotActionType.INSTANT_BOOK.value,
            "repeat_every_weeks": 1,
            "is_enabled": True,
        }
        values.update(overrides)
        template = SlotTemplate(**values)
        db.add(template)
        db.commit()
        return template

    return _make


@pytest.fixture
def make_slot_instance(db: Session) -> Callable[..., SlotInstance]:
    def _make(
        template: SlotTemplate, on_date: date, start: time, end: time, **overrides: Any
    ) -> SlotInstance:
        values: dict = {
            "venue_id": template.venue_id,
            "template_id": template.id,
            "date": on_date,
            "start_time": start,
            "end_time": end,
            "action_type": template.action_type,
            "drop_in_price": template.drop_in_price,
            "is_active": True,
        }
        values.update(overrides)
        instance = SlotInstance(**values)
        db.add(instance)
        db.commit()
        return instance

    return _make
