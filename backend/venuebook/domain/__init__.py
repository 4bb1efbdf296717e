from .cancellation_policy import RefundDecision, decide_refund
from .interval import TimeInterval, overlaps, subtract, subtract_all, validate_interval
from .recurrence import add_months, default_end_date, recurrence_dates
from .schedule import BaseBlock, BaseSchedule, LegacySchedule, TemplateSchedule, free_fragments

__all__ = [
    "BaseBlock",
    "BaseSchedule",
    "LegacySchedule",
    "RefundDecision",
    "TemplateSchedule",
    "TimeInterval",
    "add_months",
    "decide_refund",
    "default_end_date",
    "free_fragments",
    "overlaps",
    "recurrence_dates",
    "subtract",
    "subtract_all",
    "validate_interval",
]
