from __future__ import annotations

from datetime import date, time

import pytest

from venuebook.core.exceptions import InvalidInterval
from venuebook.domain.interval import TimeInterval, overlaps, subtract, subtract_all

D = date(2026, 3, 10)
OTHER_DAY = date(2026, 3, 11)


def _iv(start_h: int, end_h: int, on_date: date = D, start_m: int = 0, end_m: int = 0) -> TimeInterval:
    return TimeInterval(on_date, time(start_h, start_m), time(end_h, end_m))


class TestTimeInterval:
    def test_rejects_zero_length(self) -> None:
        with pytest.raises(InvalidInterval) as exc_info:
            TimeInterval(D, time(10), time(10))
        assert exc_info.value.code == "INVALID_INTERVAL"
        assert exc_info.value.details["date"] == "2026-03-10"

    def test_rejects_inverted(self) -> None:
        with pytest.raises(InvalidInterval):
            TimeInterval(D, time(11), time(10))

    def test_duration_minutes(self) -> None:
        assert _iv(9, 10, start_m=15, end_m=45).duration_minutes == 90

    def test_contains(self) -> None:
        assert _iv(9, 12).contains(_iv(10, 11))
        assert _iv(9, 12).contains(_iv(9, 12))
        assert not _iv(9, 12).contains(_iv(11, 13))
        assert not _iv(9, 12).contains(_iv(10, 11, on_date=OTHER_DAY))


class TestOverlaps:
    def test_touching_intervals_do_not_overlap(self) -> None:
        assert not overlaps(_iv(10, 11), _iv(11, 12))
        assert not overlaps(_iv(11, 12), _iv(10, 11))

    def test_partial_overlap(self) -> None:
        assert overlaps(_iv(10, 11, end_m=30), _iv(11, 12))

    def test_containment_overlaps(self) -> None:
        assert overlaps(_iv(9, 17), _iv(12, 13))

    def test_different_dates_never_overlap(self) -> None:
        assert not overlaps(_iv(10, 12), _iv(10, 12, on_date=OTHER_DAY))

    def test_method_matches_function(self) -> None:
        assert _iv(10, 12).overlaps(_iv(11, 13))


class TestSubtract:
    def test_interior_cut_splits_in_two(self) -> None:
        assert subtract(_iv(9, 12), _iv(10, 11)) == [_iv(9, 10), _iv(11, 12)]

    def test_full_cover_leaves_nothing(self) -> None:
        assert subtract(_iv(9, 12), _iv(8, 13)) == []
        assert subtract(_iv(9, 12), _iv(9, 12)) == []

    def test_edge_overlap_leaves_one_fragment(self) -> None:
        assert subtract(_iv(9, 12), _iv(8, 10)) == [_iv(10, 12)]
        assert subtract(_iv(9, 12), _iv(11, 13)) == [_iv(9, 11)]

    def test_disjoint_returns_base(self) -> None:
        assert subtract(_iv(9, 12), _iv(12, 13)) == [_iv(9, 12)]

    def test_subtract_all_orders_fragments(self) -> None:
        cuts = [_iv(14, 15), _iv(10, 11), _iv(9, 12, on_date=OTHER_DAY)]
        assert subtract_all(_iv(9, 17), cuts) == [_iv(9, 10), _iv(11, 14), _iv(15, 17)]

    def test_subtract_all_stops_when_consumed(self) -> None:
        assert subtract_all(_iv(9, 12), [_iv(9, 12), _iv(10, 11)]) == []
