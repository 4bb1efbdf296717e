from __future__ import annotations

from datetime import date, time
from decimal import Decimal
import logging
from types import SimpleNamespace

from venuebook.domain.interval import TimeInterval
from venuebook.domain.schedule import (
    BaseBlock,
    LegacySchedule,
    TemplateSchedule,
    build_block,
    free_fragments,
)

D = date(2026, 3, 10)


def _iv(start_h: int, end_h: int, on_date: date = D) -> TimeInterval:
    return TimeInterval(on_date, time(start_h), time(end_h))


def _block(start_h: int, end_h: int, block_id: str, on_date: date = D) -> BaseBlock:
    return BaseBlock(interval=_iv(start_h, end_h, on_date), availability_id=block_id)


class TestBuildBlock:
    def test_legacy_row(self) -> None:
        row = SimpleNamespace(id="a1", date=D, start_time=time(9), end_time=time(12))
        block = build_block(row, source="legacy")
        assert block == BaseBlock(interval=_iv(9, 12), availability_id="a1")

    def test_template_row_carries_action_and_price(self) -> None:
        row = SimpleNamespace(
            id="s1",
            date=D,
            start_time=time(9),
            end_time=time(12),
            action_type="drop_in",
            drop_in_price=Decimal("15.00"),
        )
        block = build_block(row, source="template")
        assert block is not None
        assert block.slot_instance_id == "s1"
        assert block.availability_id is None
        assert block.action_type == "drop_in"
        assert block.drop_in_price == Decimal("15.00")

    def test_invalid_row_is_skipped_with_warning(self, caplog) -> None:
        row = SimpleNamespace(id="bad", date=D, start_time=time(12), end_time=time(9))
        with caplog.at_level(logging.WARNING, logger="venuebook.domain.schedule"):
            assert build_block(row, source="legacy") is None
        assert "bad" in caplog.text


class TestFreeFragments:
    def test_schedule_kinds(self) -> None:
        assert LegacySchedule().kind == "legacy"
        assert TemplateSchedule().kind == "template"

    def test_booking_splits_block(self) -> None:
        schedule = LegacySchedule(blocks=(_block(9, 12, "a"),))
        result = free_fragments(schedule, [_iv(10, 11)])
        assert [fragment for _, fragment in result] == [_iv(9, 10), _iv(11, 12)]
        assert all(block.availability_id == "a" for block, _ in result)

    def test_fully_booked_block_vanishes(self) -> None:
        schedule = LegacySchedule(blocks=(_block(9, 12, "a"),))
        assert free_fragments(schedule, [_iv(9, 10), _iv(10, 12)]) == []

    def test_bookings_on_other_dates_are_ignored(self) -> None:
        schedule = LegacySchedule(blocks=(_block(9, 12, "a"),))
        result = free_fragments(schedule, [_iv(9, 12, on_date=date(2026, 3, 11))])
        assert [fragment for _, fragment in result] == [_iv(9, 12)]

    def test_overlapping_base_blocks_never_yield_overlapping_fragments(self) -> None:
        schedule = LegacySchedule(blocks=(_block(11, 14, "b"), _block(9, 12, "a")))
        result = free_fragments(schedule, [])
        assert [(block.availability_id, fragment) for block, fragment in result] == [
            ("a", _iv(9, 12)),
            ("b", _iv(12, 14)),
        ]

    def test_results_ordered_by_date_then_start(self) -> None:
        later = date(2026, 3, 11)
        schedule = TemplateSchedule(
            blocks=(_block(13, 15, "c", later), _block(9, 10, "b", later), _block(16, 17, "a"))
        )
        result = free_fragments(schedule, [])
        assert [fragment for _, fragment in result] == [
            _iv(16, 17),
            _iv(9, 10, later),
            _iv(13, 15, later),
        ]
