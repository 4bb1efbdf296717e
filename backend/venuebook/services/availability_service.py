# backend/venuebook/services/availability_service.py
"""
Availability Service.

Resolves the bookable slots of a venue: the venue's base schedule (legacy
blocks or materialized template instances, never both) minus its active
bookings. Partially booked base blocks are split; fully booked ones vanish.
Results are derived on every query and never stored.
"""

from datetime import date, time
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.exceptions import InvalidRange
from ..domain.interval import TimeInterval, validate_interval
from ..domain.schedule import (
    BaseSchedule,
    LegacySchedule,
    TemplateSchedule,
    build_block,
    free_fragments,
)
from ..models.availability import ScheduleMode
from ..repositories import RepositoryFactory
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.booking_repository import BookingRepository
from ..schemas.availability import ComputedSlot
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        availability_repository: Optional[AvailabilityRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.availability_repository = (
            availability_repository or RepositoryFactory.create_availability_repository(db)
        )
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(db)

    def load_base_schedule(self, venue_id: str, date_from: date, date_to: date) -> BaseSchedule:
        """
        Resolve the venue's base schedule once, from its configured source.

        Venues without a config row are legacy. Drop-in template instances
        are only part of the schedule while the venue has drop-in enabled.
        """
        config = self.availability_repository.get_schedule_config(venue_id)
        mode = config.regular_schedule_mode if config else ScheduleMode.LEGACY.value

        if mode == ScheduleMode.TEMPLATE.value:
            rows = self.availability_repository.find_slot_instances(
                venue_id,
                date_from,
                date_to,
                include_drop_in=bool(config and config.drop_in_enabled),
            )
            blocks = [build_block(row, source="template") for row in rows]
            return TemplateSchedule(blocks=tuple(b for b in blocks if b is not None))

        rows = self.availability_repository.find_legacy_blocks(venue_id, date_from, date_to)
        blocks = [build_block(row, source="legacy") for row in rows]
        return LegacySchedule(blocks=tuple(b for b in blocks if b is not None))

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self, venue_id: str, date_from: date, date_to: date
    ) -> List[ComputedSlot]:
        """
        Bookable slots for a venue between two dates (inclusive).

        Args:
            venue_id: The venue
            date_from: First date of the range
            date_to: Last date of the range

        Returns:
            Slots ordered by date and start time; none overlaps an active booking

        Raises:
            InvalidRange: date_from is after date_to
        """
        if date_from > date_to:
            raise InvalidRange(date_from, date_to)

        schedule = self.load_base_schedule(venue_id, date_from, date_to)
        bookings = self.booking_repository.find_by_venue_and_date_range(venue_id, date_from, date_to)
        booked = [TimeInterval(b.date, b.start_time, b.end_time) for b in bookings]

        slots = [
            ComputedSlot(
                date=fragment.date,
                start_time=fragment.start,
                end_time=fragment.end,
                venue_id=venue_id,
                source=schedule.kind,
                availability_id=block.availability_id,
                slot_instance_id=block.slot_instance_id,
                action_type=block.action_type,
                drop_in_price=block.drop_in_price,
            )
            for block, fragment in free_fragments(schedule, booked)
        ]

        self.logger.debug(
            f"Resolved {len(slots)} slots for venue {venue_id} "
            f"({schedule.kind}, {len(schedule.blocks)} base blocks, {len(booked)} bookings)"
        )
        return slots

    @BaseService.measure_operation("is_time_range_available")
    def is_time_range_available(
        self, venue_id: str, on_date: date, start_time: time, end_time: time
    ) -> bool:
        """
        Legacy containment check: is the range inside one available legacy block.

        This answers the older question asked by legacy-mode venues and does
        not subtract bookings; callers combine it with conflict detection.
        Partial overlaps with a block are not available here even when the
        resolver would return a matching fragment.
        """
        validate_interval(on_date, start_time, end_time)
        block = self.availability_repository.find_containing_legacy_block(
            venue_id, on_date, start_time, end_time
        )
        return block is not None
