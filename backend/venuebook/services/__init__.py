from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .conflict_checker import ConflictChecker
from .payment_gateway import PaymentGateway, RefundOutcome, StripePaymentGateway
from .template_materializer import TemplateMaterializerService, expand_templates

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "ConflictChecker",
    "PaymentGateway",
    "RefundOutcome",
    "StripePaymentGateway",
    "TemplateMaterializerService",
    "expand_templates",
]
