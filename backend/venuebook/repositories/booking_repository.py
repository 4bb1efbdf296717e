# backend/venuebook/repositories/booking_repository.py
"""
Booking repository.

All time-based queries use the booking's own columns (date, start_time,
end_time); active means pending, confirmed or completed.
"""

from datetime import date
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import ACTIVE_BOOKING_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def find_by_venue_and_date_range(
        self, venue_id: str, date_from: date, date_to: date
    ) -> List[Booking]:
        """
        Active bookings for a venue between two dates (inclusive).

        Returns:
            Bookings ordered by date and start time
        """
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(
                    Booking.venue_id == venue_id,
                    Booking.date >= date_from,
                    Booking.date <= date_to,
                    Booking.status.in_(list(ACTIVE_BOOKING_STATUSES)),
                )
                .order_by(Booking.date, Booking.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get bookings: {str(e)}")

    def find_for_conflict_check(
        self, venue_id: str, check_date: date, exclude_booking_id: Optional[str] = None
    ) -> List[Booking]:
        """
        Active bookings that could conflict with a range on one date.

        Args:
            venue_id: The venue to check
            check_date: The date to check
            exclude_booking_id: Booking being edited, left out of the result
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.venue_id == venue_id,
                Booking.date == check_date,
                Booking.status.in_(list(ACTIVE_BOOKING_STATUSES)),
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return cast(List[Booking], query.order_by(Booking.start_time).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}")

    def find_children(self, parent_booking_id: str) -> List[Booking]:
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(Booking.parent_booking_id == parent_booking_id)
                .order_by(Booking.date)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting recurring children of {parent_booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get recurring bookings: {str(e)}")
