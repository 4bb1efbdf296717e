# backend/venuebook/repositories/factory.py
"""
Repository factory.

Centralizes repository creation so services get consistently initialized
instances and tests can swap implementations in one place.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .payment_repository import PaymentRepository
    from .template_repository import TemplateRepository
    from .template_sync_repository import TemplateSyncRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for base-schedule reads."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_template_repository(db: Session) -> "TemplateRepository":
        """Create repository for slot templates and their materialized instances."""
        from .template_repository import TemplateRepository

        return TemplateRepository(db)

    @staticmethod
    def create_template_sync_repository(db: Session) -> "TemplateSyncRepository":
        """Create repository for the template sync queue."""
        from .template_sync_repository import TemplateSyncRepository

        return TemplateSyncRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        """Create repository for payment reads and refund bookkeeping."""
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)
