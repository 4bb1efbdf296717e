# backend/venuebook/repositories/payment_repository.py
"""
Payment repository.

The scheduling engine only reads captured payments and records refund
outcomes; capture itself happens in the payment collaborator.
"""

from datetime import datetime
import logging
from typing import Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.payment import Payment, PaymentStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)
        self.logger = logging.getLogger(__name__)

    def find_captured_for_booking(self, booking_id: str) -> Optional[Payment]:
        """
        The booking's captured payment, if any.

        Captured means ``paid``; a ``refund_failed`` payment still holds the
        renter's money and counts as captured for a retried refund.
        """
        try:
            return cast(
                Optional[Payment],
                self.db.query(Payment)
                .filter(
                    Payment.booking_id == booking_id,
                    Payment.status.in_(
                        [PaymentStatus.PAID.value, PaymentStatus.REFUND_FAILED.value]
                    ),
                )
                .order_by(Payment.created_at.desc())
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting captured payment for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get captured payment: {str(e)}")

    def mark_refunded(
        self, payment_id: str, amount_cents: int, refund_id: Optional[str], at: datetime
    ) -> Optional[Payment]:
        payment = self.get_by_id(payment_id)
        if payment is None:
            return None
        payment.status = PaymentStatus.REFUNDED.value
        payment.refund_amount_cents = amount_cents
        payment.refund_id = refund_id
        payment.refunded_at = at
        payment.last_error = None
        self._flush_payment(payment_id)
        return payment

    def mark_refund_failed(self, payment_id: str, error: str) -> Optional[Payment]:
        payment = self.get_by_id(payment_id)
        if payment is None:
            return None
        payment.status = PaymentStatus.REFUND_FAILED.value
        payment.last_error = error[:1000] if error else None
        self._flush_payment(payment_id)
        return payment

    def _flush_payment(self, payment_id: str) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating payment {payment_id}: {str(e)}")
            raise RepositoryException(f"Failed to update payment: {str(e)}")
