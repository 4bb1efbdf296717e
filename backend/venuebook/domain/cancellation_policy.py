"""
Refund policy for cancellations.

A renter cancelling at least ``notice_hours`` before the start gets the
captured amount back in full; later cancellations forfeit it. Cancellations
initiated by the venue owner always refund.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from venuebook.core.timezone_utils import hours_between


@dataclass(frozen=True)
class RefundDecision:
    refund_owed: bool
    amount_cents: Optional[int]
    hours_until_start: float
    reason: str  # refunded | late_cancellation | not_captured


def decide_refund(
    *,
    now: datetime,
    starts_at: datetime,
    captured_amount_cents: Optional[int],
    notice_hours: int,
    owner_initiated: bool = False,
) -> RefundDecision:
    """
    Decide whether a cancellation refunds and how much.

    The boundary is inclusive: exactly ``notice_hours`` before the start
    still refunds. Comparison is on the exact instant delta, not on rounded
    hours.
    """
    hours_until_start = hours_between(now, starts_at)

    if not captured_amount_cents:
        return RefundDecision(False, None, hours_until_start, "not_captured")

    on_time = (starts_at - now).total_seconds() >= notice_hours * 3600
    if owner_initiated or on_time:
        return RefundDecision(True, captured_amount_cents, hours_until_start, "refunded")
    return RefundDecision(False, None, hours_until_start, "late_cancellation")
