# backend/venuebook/repositories/availability_repository.py
"""
Availability repository: base-schedule reads for the resolver.

Reads legacy ``availability`` rows, materialized ``slot_instances`` and the
per-venue schedule configuration. Writes to slot instances live in
TemplateRepository; this repository is read-only.
"""

from datetime import date, time
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import (
    AvailabilityBlock,
    ScheduleMode,
    SlotActionType,
    SlotInstance,
    VenueScheduleConfig,
)

logger = logging.getLogger(__name__)


class AvailabilityRepository:
    """Data access for venue base schedules."""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(__name__)

    def get_schedule_config(self, venue_id: str) -> Optional[VenueScheduleConfig]:
        try:
            return cast(
                Optional[VenueScheduleConfig],
                self.db.query(VenueScheduleConfig)
                .filter(VenueScheduleConfig.venue_id == venue_id)
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting schedule config for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get schedule config: {str(e)}")

    def find_template_mode_venue_ids(self) -> List[str]:
        try:
            rows = (
                self.db.query(VenueScheduleConfig.venue_id)
                .filter(VenueScheduleConfig.regular_schedule_mode == ScheduleMode.TEMPLATE.value)
                .order_by(VenueScheduleConfig.venue_id)
                .all()
            )
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing template-mode venues: {str(e)}")
            raise RepositoryException(f"Failed to list template venues: {str(e)}")

    def find_legacy_blocks(
        self, venue_id: str, date_from: date, date_to: date
    ) -> List[AvailabilityBlock]:
        """Available legacy rows for the venue in [date_from, date_to]."""
        try:
            return cast(
                List[AvailabilityBlock],
                self.db.query(AvailabilityBlock)
                .filter(
                    AvailabilityBlock.venue_id == venue_id,
                    AvailabilityBlock.date >= date_from,
                    AvailabilityBlock.date <= date_to,
                    AvailabilityBlock.is_available.is_(True),
                )
                .order_by(AvailabilityBlock.date, AvailabilityBlock.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting legacy availability for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get availability: {str(e)}")

    def find_containing_legacy_block(
        self, venue_id: str, on_date: date, start_time: time, end_time: time
    ) -> Optional[AvailabilityBlock]:
        """First available legacy row that fully contains [start_time, end_time]."""
        try:
            return cast(
                Optional[AvailabilityBlock],
                self.db.query(AvailabilityBlock)
                .filter(
                    AvailabilityBlock.venue_id == venue_id,
                    AvailabilityBlock.date == on_date,
                    AvailabilityBlock.is_available.is_(True),
                    AvailabilityBlock.start_time <= start_time,
                    AvailabilityBlock.end_time >= end_time,
                )
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking legacy availability for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to check availability: {str(e)}")

    def find_slot_instances(
        self,
        venue_id: str,
        date_from: date,
        date_to: date,
        include_drop_in: bool = False,
    ) -> List[SlotInstance]:
        """
        Active materialized instances for the venue in [date_from, date_to].

        Drop-in instances are only returned when ``include_drop_in`` is set.
        """
        try:
            query = self.db.query(SlotInstance).filter(
                SlotInstance.venue_id == venue_id,
                SlotInstance.date >= date_from,
                SlotInstance.date <= date_to,
                SlotInstance.is_active.is_(True),
            )
            if not include_drop_in:
                query = query.filter(SlotInstance.action_type != SlotActionType.DROP_IN.value)
            return cast(
                List[SlotInstance],
                query.order_by(SlotInstance.date, SlotInstance.start_time).all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slot instances for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get slot instances: {str(e)}")
