"""
Timezone utilities for venue-local booking times.

Bookings store a calendar date and wall-clock times; the instant a booking
starts depends on the venue's timezone.
"""

from datetime import date, datetime, time, timezone
import logging
from typing import Optional

import pytz

from .config import settings

logger = logging.getLogger(__name__)


def get_venue_timezone(tz_name: Optional[str]) -> pytz.BaseTzInfo:
    """
    Resolve a venue timezone, falling back to the configured default.

    Args:
        tz_name: IANA timezone name stored on the venue (may be empty)

    Returns:
        pytz timezone object
    """
    if tz_name:
        try:
            return pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown venue timezone {tz_name}, using default")
    return pytz.timezone(settings.default_venue_timezone)


def venue_local_to_utc(on_date: date, at_time: time, tz_name: Optional[str]) -> datetime:
    """Convert a venue-local date and time to an aware UTC datetime."""
    tz = get_venue_timezone(tz_name)
    local_dt = tz.localize(datetime.combine(on_date, at_time))
    return local_dt.astimezone(timezone.utc)


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from ``start`` to ``end``."""
    return (end - start).total_seconds() / 3600
