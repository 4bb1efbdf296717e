# backend/venuebook/services/payment_gateway.py
"""
Payment collaborator used by cancellation.

The scheduling engine decides whether a refund is owed; issuing it is the
processor's job. Gateways never raise for processor errors: failures come
back as a RefundOutcome so the cancellation can record them and carry on.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Protocol

import stripe

from ..core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefundOutcome:
    success: bool
    refund_id: Optional[str] = None
    error: Optional[str] = None
    retryable: bool = False


class PaymentGateway(Protocol):
    def issue_refund(
        self,
        *,
        payment_intent_id: Optional[str],
        amount_cents: int,
        idempotency_key: str,
    ) -> RefundOutcome:
        ...


class StripePaymentGateway:
    """Issues refunds against Stripe PaymentIntents."""

    def __init__(self, api_key: Optional[str] = None, timeout_seconds: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.configured = False

        key = api_key or settings.stripe_api_key()
        if not key:
            self.logger.warning("Stripe secret key not configured - refunds will fail")
            return

        stripe.api_key = key
        try:
            stripe.default_http_client = stripe.http_client.RequestsClient(
                timeout=timeout_seconds or settings.refund_timeout_seconds
            )
            stripe.max_network_retries = 1
        except AttributeError as e:
            self.logger.warning(f"Could not customize Stripe HTTP client: {e}")
        self.configured = True

    def issue_refund(
        self,
        *,
        payment_intent_id: Optional[str],
        amount_cents: int,
        idempotency_key: str,
    ) -> RefundOutcome:
        if not self.configured:
            return RefundOutcome(False, error="Stripe is not configured", retryable=True)
        if not payment_intent_id:
            return RefundOutcome(False, error="Payment has no processor reference", retryable=False)

        try:
            refund = stripe.Refund.create(
                payment_intent=payment_intent_id,
                amount=amount_cents,
                reason="requested_by_customer",
                idempotency_key=idempotency_key,
            )
        except (stripe.APIConnectionError, stripe.RateLimitError) as e:
            self.logger.error(f"Transient Stripe error issuing refund: {str(e)}")
            return RefundOutcome(False, error=str(e), retryable=True)
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error issuing refund: {str(e)}")
            return RefundOutcome(False, error=str(e), retryable=False)

        status = getattr(refund, "status", None)
        if status in {"failed", "canceled"}:
            return RefundOutcome(
                False, refund_id=refund.id, error=f"Refund {status}", retryable=False
            )
        return RefundOutcome(True, refund_id=refund.id)
