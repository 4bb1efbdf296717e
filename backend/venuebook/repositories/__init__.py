"""
Repository layer for the scheduling engine.

Repositories own data access only; services own transactions.
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .payment_repository import PaymentRepository
from .template_repository import MaterializedRow, TemplateRepository, WindowReplaceResult
from .template_sync_repository import TemplateSyncRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "MaterializedRow",
    "PaymentRepository",
    "RepositoryFactory",
    "TemplateRepository",
    "TemplateSyncRepository",
    "WindowReplaceResult",
]
