"""
Base schedules and the free-slot computation.

A venue's base schedule is either its legacy explicit blocks or its
materialized template instances. Both resolve to the same ``BaseBlock``
shape before subtraction, so the subtraction itself has one code path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
import logging
from typing import Iterable, List, Literal, Optional, Tuple, Union

from venuebook.core.exceptions import InvalidInterval

from .interval import TimeInterval, subtract_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaseBlock:
    interval: TimeInterval
    availability_id: Optional[str] = None
    slot_instance_id: Optional[str] = None
    action_type: Optional[str] = None
    drop_in_price: Optional[Decimal] = None

    @property
    def sort_key(self) -> Tuple:
        return (self.interval, self.availability_id or "", self.slot_instance_id or "")


@dataclass(frozen=True)
class LegacySchedule:
    blocks: Tuple[BaseBlock, ...] = ()
    kind: Literal["legacy"] = field(default="legacy", init=False)


@dataclass(frozen=True)
class TemplateSchedule:
    blocks: Tuple[BaseBlock, ...] = ()
    kind: Literal["template"] = field(default="template", init=False)


BaseSchedule = Union[LegacySchedule, TemplateSchedule]


def build_block(row, *, source: str) -> Optional[BaseBlock]:
    """
    Convert a stored legacy row or slot instance into a BaseBlock.

    Rows with a zero-length or inverted range are skipped with a warning.
    """
    try:
        interval = TimeInterval(row.date, row.start_time, row.end_time)
    except InvalidInterval:
        logger.warning(
            "Skipping invalid %s block %s on %s (%s-%s)",
            source,
            row.id,
            row.date,
            row.start_time,
            row.end_time,
        )
        return None

    if source == "legacy":
        return BaseBlock(interval=interval, availability_id=row.id)
    return BaseBlock(
        interval=interval,
        slot_instance_id=row.id,
        action_type=row.action_type,
        drop_in_price=row.drop_in_price,
    )


def free_fragments(
    schedule: BaseSchedule, booked: Iterable[TimeInterval]
) -> List[Tuple[BaseBlock, TimeInterval]]:
    """
    Subtract booked intervals from every base block.

    Blocks are processed in (date, start, end) order; when two base blocks
    overlap, the part already emitted for the earlier block is cut from the
    later one, so no two returned fragments overlap.

    Returns:
        (source block, free fragment) pairs ordered by date and start time
    """
    booked_by_date: dict = {}
    for interval in booked:
        booked_by_date.setdefault(interval.date, []).append(interval)

    emitted_by_date: dict = {}
    results: List[Tuple[BaseBlock, TimeInterval]] = []
    for block in sorted(schedule.blocks, key=lambda b: b.sort_key):
        on_date = block.interval.date
        cuts = booked_by_date.get(on_date, []) + emitted_by_date.get(on_date, [])
        for fragment in subtract_all(block.interval, cuts):
            results.append((block, fragment))
            emitted_by_date.setdefault(on_date, []).append(fragment)

    results.sort(key=lambda pair: pair[1])
    return results
