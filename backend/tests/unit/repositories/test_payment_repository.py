from __future__ import annotations

from datetime import date, datetime, time, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from venuebook.core.exceptions import RepositoryException
from venuebook.models import PaymentStatus
from venuebook.repositories.payment_repository import PaymentRepository

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(db) -> PaymentRepository:
    return PaymentRepository(db)


@pytest.fixture
def payment(make_booking, make_payment):
    booking = make_booking(date(2026, 3, 10), time(10), time(11))
    return make_payment(booking, amount_cents=4500)


class TestFindCaptured:
    def test_refund_failed_still_counts_as_captured(self, repo, payment) -> None:
        repo.mark_refund_failed(payment.id, "card_declined")
        assert repo.find_captured_for_booking(payment.booking_id).id == payment.id

    def test_refunded_payment_is_not_captured(self, repo, payment) -> None:
        repo.mark_refunded(payment.id, 4500, "re_1", T0)
        assert repo.find_captured_for_booking(payment.booking_id) is None


class TestMarkRefunded:
    def test_records_refund(self, repo, payment) -> None:
        repo.mark_refund_failed(payment.id, "timeout")

        updated = repo.mark_refunded(payment.id, 4500, "re_1", T0)

        assert updated is payment
        assert payment.status == PaymentStatus.REFUNDED.value
        assert payment.refund_amount_cents == 4500
        assert payment.refund_id == "re_1"
        assert payment.last_error is None

    def test_unknown_payment(self, repo) -> None:
        assert repo.mark_refunded("01MISSING", 4500, "re_1", T0) is None
        assert repo.mark_refund_failed("01MISSING", "boom") is None


class TestMarkRefundFailed:
    def test_records_error(self, repo, payment) -> None:
        repo.mark_refund_failed(payment.id, "x" * 1200)

        assert payment.status == PaymentStatus.REFUND_FAILED.value
        assert len(payment.last_error) == 1000


class TestErrors:
    def test_flush_errors_become_repository_exceptions(self, repo, db, payment) -> None:
        with patch.object(
            db, "flush", side_effect=OperationalError("UPDATE", {}, Exception("db down"))
        ):
            with pytest.raises(RepositoryException):
                repo.mark_refunded(payment.id, 4500, "re_1", T0)
            with pytest.raises(RepositoryException):
                repo.mark_refund_failed(payment.id, "card_declined")
