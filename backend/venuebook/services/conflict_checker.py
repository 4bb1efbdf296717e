# backend/venuebook/services/conflict_checker.py
"""
Conflict Checker Service.

Detects overlap between a candidate booking interval and the venue's active
(pending, confirmed or completed) bookings on the same date. Overlap is
half-open: a booking ending at 11:00 does not conflict with one starting at
11:00.

Detection is a pure read. A conflict is a normal outcome reported in the
result; write paths that must refuse the booking call ``ensure_no_conflict``.
"""

from datetime import date, time
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.exceptions import ConflictDetected
from ..domain.interval import TimeInterval, overlaps, validate_interval
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import BookingRead, ConflictCheckResult
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)

    def find_conflicting_bookings(
        self,
        venue_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Active bookings overlapping [start_time, end_time) on ``check_date``.

        Raises:
            InvalidInterval: zero-length or inverted candidate
        """
        candidate = validate_interval(check_date, start_time, end_time)
        bookings = self.repository.find_for_conflict_check(venue_id, check_date, exclude_booking_id)
        conflicts = [
            booking
            for booking in bookings
            if overlaps(candidate, TimeInterval(booking.date, booking.start_time, booking.end_time))
        ]
        if conflicts:
            self.logger.info(
                f"Found {len(conflicts)} booking conflicts for venue {venue_id} "
                f"on {check_date} between {start_time}-{end_time}"
            )
        return conflicts

    @BaseService.measure_operation("check_conflicts")
    def check_conflicts(
        self,
        venue_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> ConflictCheckResult:
        """
        Check a candidate booking against existing bookings.

        Args:
            venue_id: The venue to check
            check_date: The date of the candidate
            start_time: Candidate start (inclusive)
            end_time: Candidate end (exclusive)
            exclude_booking_id: Booking being edited, ignored in the check

        Returns:
            ConflictCheckResult listing every overlapping booking
        """
        conflicts = self.find_conflicting_bookings(
            venue_id, check_date, start_time, end_time, exclude_booking_id
        )
        return ConflictCheckResult(
            has_conflict=bool(conflicts),
            conflicting_bookings=[BookingRead.model_validate(b) for b in conflicts],
        )

    def ensure_no_conflict(
        self,
        venue_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """Raise ConflictDetected if the candidate overlaps an active booking."""
        conflicts = self.find_conflicting_bookings(
            venue_id, check_date, start_time, end_time, exclude_booking_id
        )
        if conflicts:
            raise ConflictDetected(
                details={
                    "venue_id": venue_id,
                    "date": check_date.isoformat(),
                    "start_time": start_time.isoformat(),
                    "end_time": end_time.isoformat(),
                    "conflicting_booking_ids": [b.id for b in conflicts],
                }
            )
