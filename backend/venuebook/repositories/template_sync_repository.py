# backend/venuebook/repositories/template_sync_repository.py
"""
Repository for the template sync queue.

Implements enqueue (one row per venue), batch claiming with row locking,
and compare-and-set completion keyed on ``requested_at`` so a re-enqueue
that lands while a venue is processing is never overwritten.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Optional, cast

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.template_sync import SyncStatus, TemplateSyncQueueEntry
from .base_repository import get_dialect_name

logger = logging.getLogger(__name__)


class TemplateSyncRepository:
    """Data access helpers for template sync queue rows."""

    def __init__(self, db: Session):
        self.db = db
        self._dialect = get_dialect_name(db, default="postgresql").lower()

    # ------------------------------------------------------------------ enqueue
    def enqueue(self, venue_id: str, requested_at: datetime, reason: Optional[str] = None) -> None:
        """Insert the venue's queue row, or flip an existing one back to pending."""
        values = {
            "status": SyncStatus.PENDING.value,
            "reason": reason,
            "requested_at": requested_at,
            "last_error": None,
        }
        try:
            if self._dialect == "postgresql":
                stmt = pg_insert(TemplateSyncQueueEntry).values(
                    venue_id=venue_id, attempt_count=0, **values
                )
                stmt = stmt.on_conflict_do_update(index_elements=["venue_id"], set_=values)
                self.db.execute(stmt)
            else:
                existing = self.db.get(TemplateSyncQueueEntry, venue_id)
                if existing is None:
                    self.db.add(
                        TemplateSyncQueueEntry(venue_id=venue_id, attempt_count=0, **values)
                    )
                else:
                    for key, value in values.items():
                        setattr(existing, key, value)
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error enqueueing template sync for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to enqueue template sync: {str(e)}")

    # ---------------------------------------------------------------- claiming
    def claim_pending(
        self, limit: int, now: datetime, stale_before: datetime
    ) -> list[TemplateSyncQueueEntry]:
        """
        Claim up to ``limit`` entries and mark them processing.

        Eligible rows are pending or failed entries, plus processing entries
        whose claim started before ``stale_before``. Oldest request first,
        venue id breaks ties. Locked rows are skipped on PostgreSQL so
        concurrent workers never claim the same venue.
        """
        stmt: Select[Any] = (
            select(TemplateSyncQueueEntry)
            .where(
                or_(
                    TemplateSyncQueueEntry.status.in_(
                        [SyncStatus.PENDING.value, SyncStatus.FAILED.value]
                    ),
                    and_(
                        TemplateSyncQueueEntry.status == SyncStatus.PROCESSING.value,
                        TemplateSyncQueueEntry.started_at < stale_before,
                    ),
                )
            )
            .order_by(
                TemplateSyncQueueEntry.requested_at.asc(), TemplateSyncQueueEntry.venue_id.asc()
            )
            .limit(limit)
        )
        if self._dialect == "postgresql":
            stmt = stmt.with_for_update(skip_locked=True)

        try:
            rows = cast(list[TemplateSyncQueueEntry], self.db.execute(stmt).scalars().all())
            for row in rows:
                if row.status == SyncStatus.PROCESSING.value:
                    logger.warning(
                        "Reclaiming stale template sync claim",
                        extra={"venue_id": row.venue_id, "started_at": str(row.started_at)},
                    )
                row.status = SyncStatus.PROCESSING.value
                row.started_at = now
                row.finished_at = None
                row.attempt_count = (row.attempt_count or 0) + 1
            self.db.flush()
            return rows
        except SQLAlchemyError as e:
            logger.error(f"Error claiming template sync entries: {str(e)}")
            raise RepositoryException(f"Failed to claim template sync entries: {str(e)}")

    def get(self, venue_id: str) -> Optional[TemplateSyncQueueEntry]:
        return cast(Optional[TemplateSyncQueueEntry], self.db.get(TemplateSyncQueueEntry, venue_id))

    # ------------------------------------------------------------- state updates
    def mark_done(self, venue_id: str, requested_at: datetime, now: datetime) -> bool:
        """
        Complete a claim if the venue was not re-enqueued meanwhile.

        Returns:
            False when a newer request replaced the claimed one; the row then
            stays pending for the next batch.
        """
        return self._finish(
            venue_id,
            requested_at,
            status=SyncStatus.DONE.value,
            finished_at=now,
            last_error=None,
        )

    def mark_failed(self, venue_id: str, requested_at: datetime, error: str, now: datetime) -> bool:
        """Record a failed claim for retry; same compare-and-set as mark_done."""
        return self._finish(
            venue_id,
            requested_at,
            status=SyncStatus.FAILED.value,
            finished_at=now,
            last_error=(error[:1000] if error else None),
        )

    def _finish(self, venue_id: str, requested_at: datetime, **values: Any) -> bool:
        try:
            stmt = (
                select(TemplateSyncQueueEntry)
                .where(TemplateSyncQueueEntry.venue_id == venue_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            row = self.db.execute(stmt).scalar_one_or_none()
            if (
                row is None
                or row.status != SyncStatus.PROCESSING.value
                or _utc_naive(row.requested_at) != _utc_naive(requested_at)
            ):
                return False
            for key, value in values.items():
                setattr(row, key, value)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            logger.error(f"Error finishing template sync for venue {venue_id}: {str(e)}")
            raise RepositoryException(f"Failed to update template sync entry: {str(e)}")


def _utc_naive(value: datetime) -> datetime:
    """Comparable form of a timestamp whether or not the driver kept its tzinfo."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
