# backend/venuebook/tasks/beat_schedule.py
"""Celery Beat schedule for periodic scheduling-engine work."""

from typing import Any, Dict

from celery.schedules import crontab

from venuebook.core.config import settings


def get_beat_schedule() -> Dict[str, Dict[str, Any]]:
    return {
        # Template edits enqueue their venue; drain the queue every 5 minutes
        "process-template-sync-queue": {
            "task": "template_sync.process_queue",
            "schedule": crontab(minute="*/5"),
            "kwargs": {
                "limit": settings.sync_queue_limit,
                "horizon_days": settings.sync_horizon_days,
            },
            "options": {"queue": "scheduling", "expires": 240},
        },
        # Roll every template venue's window forward once a day
        "refresh-template-horizons": {
            "task": "template_sync.enqueue_all_template_venues",
            "schedule": crontab(hour=4, minute=15),
            "options": {"queue": "scheduling"},
        },
    }
