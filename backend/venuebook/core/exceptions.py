# backend/venuebook/core/exceptions.py
"""
Domain-specific exceptions for the scheduling engine.

These exceptions provide clear, business-focused error messages
that an API layer can map to status codes and envelopes.
"""

from datetime import date, time
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationException(DomainException):
    """Raised when business validation fails."""


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""


class ServiceException(DomainException):
    """Raised when a service operation fails."""


# Specific scheduling exceptions


class InvalidInterval(ValidationException):
    """Raised for zero-length or inverted time ranges."""

    def __init__(self, start_time: time, end_time: time, *, on_date: Optional[date] = None):
        details: Dict[str, Any] = {
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
        }
        if on_date is not None:
            details["date"] = on_date.isoformat()
        super().__init__(
            message=f"Start time {start_time} must be before end time {end_time}",
            code="INVALID_INTERVAL",
            details=details,
        )


class InvalidRange(ValidationException):
    """Raised when a date range is inverted."""

    def __init__(self, date_from: date, date_to: date):
        super().__init__(
            message=f"date_from {date_from} must not be after date_to {date_to}",
            code="INVALID_RANGE",
            details={"date_from": date_from.isoformat(), "date_to": date_to.isoformat()},
        )


class BookingNotFound(NotFoundException):
    """Raised when a booking id does not resolve."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Booking not found",
            code="NOT_FOUND",
            details={"booking_id": booking_id},
        )


class AlreadyCancelled(BusinessRuleException):
    """Raised when cancelling a booking that is already cancelled."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Booking is already cancelled",
            code="ALREADY_CANCELLED",
            details={"booking_id": booking_id},
        )


class BookingNotCancellable(BusinessRuleException):
    """Raised when the booking's status does not allow cancellation."""

    def __init__(self, booking_id: str, status: str):
        super().__init__(
            message=f"Booking cannot be cancelled - current status: {status}",
            code="BOOKING_NOT_CANCELLABLE",
            details={"booking_id": booking_id, "status": status},
        )


class BookingAlreadyStarted(BusinessRuleException):
    """Raised when cancelling a booking whose start time has passed."""

    def __init__(self, booking_id: str, hours_until_start: float):
        super().__init__(
            message="Cannot cancel a booking that has already started",
            code="BOOKING_ALREADY_STARTED",
            details={"booking_id": booking_id, "hours_until_start": round(hours_until_start, 2)},
        )


class InvalidStatusTransition(BusinessRuleException):
    """Raised for any other disallowed booking status change."""

    def __init__(self, booking_id: str, current: str, target: str):
        super().__init__(
            message=f"Cannot move booking from {current} to {target}",
            code="INVALID_STATUS_TRANSITION",
            details={"booking_id": booking_id, "current": current, "target": target},
        )


class RecurrenceRangeTooLarge(ValidationException):
    """Raised when a recurrence window would produce too many instances."""

    def __init__(self, max_instances: int, recurring_type: str, end_date: date):
        super().__init__(
            message=(
                f"Recurring {recurring_type} series until {end_date} exceeds "
                f"the limit of {max_instances} instances"
            ),
            code="RECURRENCE_RANGE_TOO_LARGE",
            details={
                "max_instances": max_instances,
                "recurring_type": recurring_type,
                "recurring_end_date": end_date.isoformat(),
            },
        )


class ConflictDetected(ConflictException):
    """Raised by write paths when a booking overlaps an existing booking."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class StorageFailure(ServiceException):
    """Wraps any storage collaborator error."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="STORAGE_FAILURE", details=details)


class RefundFailure(ServiceException):
    """
    A refund that could not be issued.

    Never raised out of a cancellation: it is attached to the
    CancellationResult so the caller can schedule reconciliation.
    """

    def __init__(self, message: str, *, retryable: bool = True, details: Optional[Dict[str, Any]] = None):
        self.retryable = retryable
        super().__init__(message=message, code="REFUND_FAILURE", details=details)


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
