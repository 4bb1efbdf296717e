# backend/venuebook/repositories/template_repository.py
"""
Slot template repository.

Reads enabled templates and replaces a venue's materialized slot instances
inside a date window. The replacement diffs on the natural key
(venue, template, date, start, end): rows that already match are left
untouched, so re-running an unchanged materialization writes nothing.
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
import logging
from typing import Dict, Iterable, List, Optional, Tuple, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import SlotInstance, SlotTemplate

logger = logging.getLogger(__name__)

NaturalKey = Tuple[str, date, time, time]


@dataclass(frozen=True)
class MaterializedRow:
    """One desired slot instance produced by template expansion."""

    template_id: str
    date: date
    start_time: time
    end_time: time
    action_type: str
    drop_in_price: Optional[Decimal] = None

    @property
    def key(self) -> NaturalKey:
        return (self.template_id, self.date, self.start_time, self.end_time)


@dataclass(frozen=True)
class WindowReplaceResult:
    total: int
    inserted: int
    deleted: int
    updated: int

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.deleted or self.updated)


class TemplateRepository:
    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(__name__)

    def find_enabled_templates(self, venue_id: str) -> List[SlotTemplate]:
        try:
            return cast(
                List[SlotTemplate],
                self.db.query(SlotTemplate)
                .filter(SlotTemplate.venue_id == venue_id, SlotTemplate.is_enabled.is_(True))
                .order_by(SlotTemplate.day_of_week, SlotTemplate.start_time, SlotTemplate.id)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting templates for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get slot templates: {str(e)}")

    def find_instances_in_window(
        self, venue_id: str, window_start: date, window_end: date
    ) -> List[SlotInstance]:
        try:
            return cast(
                List[SlotInstance],
                self.db.query(SlotInstance)
                .filter(
                    SlotInstance.venue_id == venue_id,
                    SlotInstance.date >= window_start,
                    SlotInstance.date <= window_end,
                )
                .order_by(SlotInstance.date, SlotInstance.start_time, SlotInstance.template_id)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slot instances for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to get slot instances: {str(e)}")

    def replace_materialized_window(
        self,
        venue_id: str,
        window_start: date,
        window_end: date,
        rows: Iterable[MaterializedRow],
    ) -> WindowReplaceResult:
        """
        Make the venue's instances in [window_start, window_end] equal ``rows``.

        Flushes only; the caller's transaction decides whether the whole
        window lands or none of it does.
        """
        desired: Dict[NaturalKey, MaterializedRow] = {row.key: row for row in rows}
        try:
            existing = self.find_instances_in_window(venue_id, window_start, window_end)
            existing_by_key: Dict[NaturalKey, SlotInstance] = {}
            deleted = 0
            for instance in existing:
                key = (instance.template_id, instance.date, instance.start_time, instance.end_time)
                if key in desired and key not in existing_by_key:
                    existing_by_key[key] = instance
                else:
                    self.db.delete(instance)
                    deleted += 1

            inserted = 0
            updated = 0
            for key, row in desired.items():
                current = existing_by_key.get(key)
                if current is None:
                    self.db.add(
                        SlotInstance(
                            venue_id=venue_id,
                            template_id=row.template_id,
                            date=row.date,
                            start_time=row.start_time,
                            end_time=row.end_time,
                            action_type=row.action_type,
                            drop_in_price=row.drop_in_price,
                            is_active=True,
                        )
                    )
                    inserted += 1
                elif (
                    current.action_type != row.action_type
                    or _price(current.drop_in_price) != _price(row.drop_in_price)
                    or not current.is_active
                ):
                    current.action_type = row.action_type
                    current.drop_in_price = row.drop_in_price
                    current.is_active = True
                    updated += 1

            self.db.flush()
            return WindowReplaceResult(
                total=len(desired), inserted=inserted, deleted=deleted, updated=updated
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing materialized window for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to replace slot instances: {str(e)}")


def _price(value: Optional[Decimal]) -> Optional[Decimal]:
    return None if value is None else Decimal(value).quantize(Decimal("0.01"))
