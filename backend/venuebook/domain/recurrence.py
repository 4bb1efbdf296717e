"""Date stepping for recurring booking series."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import List, Optional


def add_months(start: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Move ``start`` forward by whole months.

    The day of month is ``anchor_day`` (default: ``start.day``) clamped to the
    target month's length, so Jan 31 + 1 month is Feb 28/29 and the series
    returns to the 31st in March.
    """
    day = anchor_day or start.day
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def recurrence_dates(
    start: date, recurring_type: str, end: date, max_count: Optional[int] = None
) -> List[date]:
    """
    Dates after ``start`` up to and including ``end`` for the recurrence.

    ``start`` itself (the parent booking's date) is never included. When
    ``max_count`` is given, stepping stops once one more than ``max_count``
    dates are collected, which is enough for callers to detect overflow
    without walking a malformed range to the end.
    """
    dates: List[date] = []
    step = 1
    while True:
        if recurring_type == "daily":
            candidate = start + timedelta(days=step)
        elif recurring_type == "weekly":
            candidate = start + timedelta(weeks=step)
        elif recurring_type == "monthly":
            candidate = add_months(start, step, anchor_day=start.day)
        else:
            raise ValueError(f"Unsupported recurring type: {recurring_type}")

        if candidate > end:
            break
        dates.append(candidate)
        if max_count is not None and len(dates) > max_count:
            break
        step += 1
    return dates


def default_end_date(
    start: date,
    recurring_type: str,
    *,
    daily_max_days: int,
    weekly_max_months: int,
    monthly_max_months: int,
) -> date:
    """End date used when a recurring booking omits one."""
    if recurring_type == "daily":
        return start + timedelta(days=daily_max_days)
    if recurring_type == "weekly":
        return add_months(start, weekly_max_months)
    if recurring_type == "monthly":
        return add_months(start, monthly_max_months)
    raise ValueError(f"Unsupported recurring type: {recurring_type}")
