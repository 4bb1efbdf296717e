"""Payment records tied to bookings (captured amounts and refund state)."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class PaymentStatus(str, Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    REFUND_FAILED = "refund_failed"


class Payment(Base):
    """Processor payment for a booking; ``amount_cents`` is what was actually captured."""

    __tablename__ = "payments"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    booking_id = Column(String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    stripe_payment_intent_id = Column(String(255), nullable=True, unique=True)
    amount_cents = Column(Integer, nullable=False, comment="Captured amount in cents")
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)

    refund_amount_cents = Column(Integer, nullable=True)
    refund_id = Column(String(255), nullable=True)
    refunded_at = Column(DateTime(timezone=True), nullable=True)
    last_error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Payment(booking_id={self.booking_id}, amount={self.amount_cents}, status={self.status})>"
