from __future__ import annotations

from datetime import date, time

import pytest

from venuebook.core.exceptions import ConflictDetected, InvalidInterval
from venuebook.models import BookingStatus
from venuebook.services.conflict_checker import ConflictChecker

D = date(2026, 3, 10)


@pytest.fixture
def checker(db, clock) -> ConflictChecker:
    return ConflictChecker(db, clock=clock)


class TestCheckConflicts:
    def test_no_bookings(self, checker) -> None:
        result = checker.check_conflicts("venue-1", D, time(10), time(11))
        assert result.has_conflict is False
        assert result.conflicting_bookings == []

    def test_touching_boundaries_do_not_conflict(self, checker, make_booking) -> None:
        make_booking(D, time(10), time(11))
        assert checker.check_conflicts("venue-1", D, time(11), time(12)).has_conflict is False
        assert checker.check_conflicts("venue-1", D, time(9), time(10)).has_conflict is False

    def test_overlap_is_reported(self, checker, make_booking) -> None:
        existing = make_booking(D, time(10), time(11))
        result = checker.check_conflicts("venue-1", D, time(10, 30), time(11, 30))
        assert result.has_conflict is True
        assert [b.id for b in result.conflicting_bookings] == [existing.id]

    def test_every_overlapping_booking_is_listed(self, checker, make_booking) -> None:
        first = make_booking(D, time(9), time(10))
        second = make_booking(D, time(11), time(12), status=BookingStatus.PENDING.value)
        make_booking(D, time(13), time(14))
        result = checker.check_conflicts("venue-1", D, time(9, 30), time(12, 30))
        assert [b.id for b in result.conflicting_bookings] == [first.id, second.id]

    def test_excluded_booking_is_ignored(self, checker, make_booking) -> None:
        existing = make_booking(D, time(10), time(11))
        result = checker.check_conflicts(
            "venue-1", D, time(10), time(11), exclude_booking_id=existing.id
        )
        assert result.has_conflict is False

    def test_cancelled_bookings_do_not_conflict(self, checker, make_booking) -> None:
        make_booking(D, time(10), time(11), status=BookingStatus.CANCELLED.value)
        assert checker.check_conflicts("venue-1", D, time(10), time(11)).has_conflict is False

    def test_completed_bookings_still_conflict(self, checker, make_booking) -> None:
        make_booking(D, time(10), time(11), status=BookingStatus.COMPLETED.value)
        assert checker.check_conflicts("venue-1", D, time(10), time(11)).has_conflict is True

    def test_other_venues_and_dates_are_ignored(self, checker, make_booking) -> None:
        make_booking(D, time(10), time(11), venue_id="venue-2")
        make_booking(date(2026, 3, 11), time(10), time(11))
        assert checker.check_conflicts("venue-1", D, time(10), time(11)).has_conflict is False

    def test_invalid_candidate_raises(self, checker) -> None:
        with pytest.raises(InvalidInterval):
            checker.check_conflicts("venue-1", D, time(11), time(10))


class TestEnsureNoConflict:
    def test_raises_with_conflicting_ids(self, checker, make_booking) -> None:
        existing = make_booking(D, time(10), time(11))
        with pytest.raises(ConflictDetected) as exc_info:
            checker.ensure_no_conflict("venue-1", D, time(10, 30), time(11, 30))
        assert exc_info.value.code == "BOOKING_CONFLICT"
        assert exc_info.value.details["conflicting_booking_ids"] == [existing.id]
        payload = exc_info.value.to_dict()
        assert payload["code"] == "BOOKING_CONFLICT"
        assert payload["details"]["date"] == "2026-03-10"

    def test_passes_when_free(self, checker, make_booking) -> None:
        make_booking(D, time(10), time(11))
        checker.ensure_no_conflict("venue-1", D, time(11), time(12))
