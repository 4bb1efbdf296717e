"""Injectable clocks so policy and materialization logic stay deterministic."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol

import pytz


class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant, timezone-aware in UTC."""

    def today(self, tz_name: str) -> date:
        """Current calendar date in the given IANA timezone."""


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self, tz_name: str) -> date:
        return self.now().astimezone(pytz.timezone(tz_name)).date()


class FixedClock:
    """A clock pinned to one instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._instant

    def today(self, tz_name: str) -> date:
        return self._instant.astimezone(pytz.timezone(tz_name)).date()

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


system_clock = SystemClock()
