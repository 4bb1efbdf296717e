# backend/venuebook/services/template_materializer.py
"""
Template Materializer.

Expands a venue's enabled slot templates into dated slot instances for a
rolling window ``[today, today + horizon_days]`` (venue-local today), driven
by the template sync queue.

Each venue's window is replaced in one transaction together with its queue
completion, so readers see either the old window or the new one. Rows are
diffed on their natural key; re-running an unchanged venue writes nothing.
Instances dated before today are left alone.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.config import settings
from ..core.exceptions import StorageFailure
from ..models.availability import SlotTemplate
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.template_repository import MaterializedRow
from ..schemas.template_sync import SyncRunResult
from .base import BaseService

logger = logging.getLogger(__name__)


def sunday_based_weekday(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def _first_matching_on_or_after(start: date, day_of_week: int) -> date:
    return start + timedelta(days=(day_of_week - sunday_based_weekday(start)) % 7)


def template_applies_on(template: SlotTemplate, d: date) -> bool:
    if sunday_based_weekday(d) != template.day_of_week:
        return False
    if template.effective_from and d < template.effective_from:
        return False
    if template.effective_until and d > template.effective_until:
        return False

    repeat = template.repeat_every_weeks or 1
    if repeat > 1 and template.effective_from:
        anchor = _first_matching_on_or_after(template.effective_from, template.day_of_week)
        if ((d - anchor).days // 7) % repeat != 0:
            return False
    return True


def expand_templates(
    templates: Iterable[SlotTemplate], window_start: date, window_end: date
) -> List[MaterializedRow]:
    """
    Concrete rows for every template occurrence in [window_start, window_end].

    Pure: the result depends only on the templates and the window.
    Templates with an empty or inverted time range are skipped.
    """
    rows: List[MaterializedRow] = []
    for template in templates:
        if not template.is_enabled:
            continue
        if not template.start_time < template.end_time:
            logger.warning(f"Skipping template {template.id} with invalid range")
            continue

        current = _first_matching_on_or_after(window_start, template.day_of_week)
        while current <= window_end:
            if template_applies_on(template, current):
                rows.append(
                    MaterializedRow(
                        template_id=template.id,
                        date=current,
                        start_time=template.start_time,
                        end_time=template.end_time,
                        action_type=template.action_type,
                        drop_in_price=template.drop_in_price,
                    )
                )
            current += timedelta(days=7)

    rows.sort(key=lambda r: (r.date, r.start_time, r.end_time, r.template_id))
    return rows


@dataclass(frozen=True)
class _Claim:
    venue_id: str
    requested_at: datetime


class TemplateMaterializerService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.template_repository = RepositoryFactory.create_template_repository(db)
        self.sync_repository = RepositoryFactory.create_template_sync_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)

    @BaseService.measure_operation("enqueue_venue_sync")
    def enqueue_venue_sync(self, venue_id: str, reason: Optional[str] = None) -> None:
        """Request (re)materialization of a venue after its templates changed."""
        with self.transaction():
            self.sync_repository.enqueue(venue_id, self.clock.now(), reason)
        self.logger.info(
            "Template sync enqueued", extra={"venue_id": venue_id, "reason": reason}
        )

    @BaseService.measure_operation("enqueue_template_venues")
    def enqueue_template_venues(self, reason: Optional[str] = None) -> int:
        """Enqueue every template-mode venue; returns how many were enqueued."""
        with self.transaction():
            venue_ids = self.availability_repository.find_template_mode_venue_ids()
            now = self.clock.now()
            for venue_id in venue_ids:
                self.sync_repository.enqueue(venue_id, now, reason)
        return len(venue_ids)

    @BaseService.measure_operation("process_sync_queue")
    def process_sync_queue(
        self, limit: Optional[int] = None, horizon_days: Optional[int] = None
    ) -> List[SyncRunResult]:
        """
        Claim a batch of queued venues and materialize each one.

        Args:
            limit: Maximum venues per batch (default from settings, 25)
            horizon_days: Days ahead to materialize (default from settings, 180)

        Returns:
            One result per claimed venue; failed venues are reported, not raised
        """
        if limit is None:
            limit = settings.sync_queue_limit
        if horizon_days is None:
            horizon_days = settings.sync_horizon_days

        now = self.clock.now()
        stale_before = now - timedelta(minutes=settings.sync_stale_after_minutes)
        with self.transaction():
            entries = self.sync_repository.claim_pending(limit, now, stale_before)
            claims = [_Claim(e.venue_id, e.requested_at) for e in entries]

        if claims:
            self.logger.info(f"Claimed {len(claims)} venues for template sync")

        return [self._sync_venue(claim, horizon_days) for claim in claims]

    def _sync_venue(self, claim: _Claim, horizon_days: int) -> SyncRunResult:
        venue_id = claim.venue_id
        window_start = window_end = None
        try:
            with self.transaction():
                self.advisory_lock(f"template_sync:{venue_id}")
                config = self.availability_repository.get_schedule_config(venue_id)
                tz_name = (config.timezone if config else None) or settings.default_venue_timezone
                window_start = self.clock.today(tz_name)
                window_end = window_start + timedelta(days=horizon_days)

                templates = self.template_repository.find_enabled_templates(venue_id)
                rows = expand_templates(templates, window_start, window_end)
                replaced = self.template_repository.replace_materialized_window(
                    venue_id, window_start, window_end, rows
                )
                completed = self.sync_repository.mark_done(
                    venue_id, claim.requested_at, self.clock.now()
                )
        except Exception as e:
            self.logger.error(
                f"Template sync failed for venue {venue_id}: {str(e)}",
                extra={"venue_id": venue_id},
            )
            try:
                with self.transaction():
                    self.sync_repository.mark_failed(
                        venue_id, claim.requested_at, str(e), self.clock.now()
                    )
            except StorageFailure as mark_error:
                # Entry stays processing; the stale timeout makes it claimable again
                self.logger.error(
                    f"Could not record sync failure for venue {venue_id}: {mark_error.message}",
                    extra={"venue_id": venue_id},
                )
            prometheus_metrics.record_template_sync("failed")
            today = window_start or self.clock.today(settings.default_venue_timezone)
            return SyncRunResult(
                venue_id=venue_id,
                status="failed",
                refreshed_rows=0,
                window_start=today,
                window_end=window_end or today + timedelta(days=horizon_days),
                error=str(e),
            )

        if not completed:
            self.logger.info(
                "Venue re-enqueued during sync; leaving it pending",
                extra={"venue_id": venue_id},
            )
        prometheus_metrics.record_template_sync(
            "done", inserted=replaced.inserted, deleted=replaced.deleted
        )
        self.logger.info(
            "Template sync complete",
            extra={
                "venue_id": venue_id,
                "refreshed_rows": replaced.total,
                "inserted": replaced.inserted,
                "deleted": replaced.deleted,
                "updated": replaced.updated,
            },
        )
        return SyncRunResult(
            venue_id=venue_id,
            status="done",
            refreshed_rows=replaced.total,
            inserted_rows=replaced.inserted,
            deleted_rows=replaced.deleted,
            updated_rows=replaced.updated,
            window_start=window_start,
            window_end=window_end,
        )
