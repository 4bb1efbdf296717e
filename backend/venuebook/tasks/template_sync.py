# backend/venuebook/tasks/template_sync.py
"""Celery tasks that drive the template sync queue."""

import logging
from typing import Any, Callable, Dict, Optional, TypeVar, cast

from celery import shared_task

from venuebook.database import get_db_session
from venuebook.services.template_materializer import TemplateMaterializerService

logger = logging.getLogger(__name__)

_TaskFunc = TypeVar("_TaskFunc", bound=Callable[..., Any])


def _typed_shared_task(*args: Any, **kwargs: Any) -> Callable[[_TaskFunc], _TaskFunc]:
    """Typed wrapper for Celery's shared_task decorator."""
    return cast(Callable[[_TaskFunc], _TaskFunc], shared_task(*args, **kwargs))


@_typed_shared_task(name="template_sync.process_queue")
def process_template_sync_queue(
    limit: Optional[int] = None, horizon_days: Optional[int] = None
) -> Dict[str, Any]:
    """
    Drain one batch of the template sync queue.

    Returns:
        Summary with per-venue refreshed row counts
    """
    with get_db_session() as db:
        results = TemplateMaterializerService(db).process_sync_queue(
            limit=limit, horizon_days=horizon_days
        )

    failed = [r for r in results if r.status == "failed"]
    if failed:
        logger.warning(
            "[TEMPLATE-SYNC] %d of %d venues failed",
            len(failed),
            len(results),
            extra={"failed_venue_ids": [r.venue_id for r in failed]},
        )
    else:
        logger.info("[TEMPLATE-SYNC] processed %d venues", len(results))

    return {
        "processed": len(results),
        "failed": len(failed),
        "venues": [
            {"venue_id": r.venue_id, "refreshed_rows": r.refreshed_rows, "status": r.status}
            for r in results
        ],
    }


@_typed_shared_task(name="template_sync.enqueue_all_template_venues", ignore_result=True)
def enqueue_all_template_venues() -> int:
    """Re-enqueue every template-mode venue so its window rolls forward a day."""
    with get_db_session() as db:
        count = TemplateMaterializerService(db).enqueue_template_venues(reason="horizon_roll")
    logger.info("[TEMPLATE-SYNC] enqueued %d template venues for horizon refresh", count)
    return count
