from __future__ import annotations

from datetime import datetime, timedelta, timezone

from venuebook.domain.cancellation_policy import decide_refund

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _decide(starts_in: timedelta, captured: int | None = 4500, owner: bool = False):
    return decide_refund(
        now=NOW,
        starts_at=NOW + starts_in,
        captured_amount_cents=captured,
        notice_hours=48,
        owner_initiated=owner,
    )


class TestDecideRefund:
    def test_exactly_at_notice_boundary_refunds(self) -> None:
        decision = _decide(timedelta(hours=48))
        assert decision.refund_owed is True
        assert decision.amount_cents == 4500
        assert decision.hours_until_start == 48.0
        assert decision.reason == "refunded"

    def test_one_second_inside_notice_window_forfeits(self) -> None:
        decision = _decide(timedelta(hours=48) - timedelta(seconds=1))
        assert decision.refund_owed is False
        assert decision.amount_cents is None
        assert decision.reason == "late_cancellation"

    def test_well_ahead_refunds_captured_amount_not_price(self) -> None:
        decision = _decide(timedelta(days=10), captured=1234)
        assert decision.amount_cents == 1234

    def test_owner_initiated_always_refunds(self) -> None:
        decision = _decide(timedelta(hours=2), owner=True)
        assert decision.refund_owed is True
        assert decision.amount_cents == 4500

    def test_started_booking_reports_negative_hours(self) -> None:
        decision = _decide(-timedelta(hours=1))
        assert decision.refund_owed is False
        assert decision.hours_until_start == -1.0

    def test_nothing_captured(self) -> None:
        for captured in (None, 0):
            decision = _decide(timedelta(days=5), captured=captured)
            assert decision.refund_owed is False
            assert decision.reason == "not_captured"
