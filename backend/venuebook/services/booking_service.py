# backend/venuebook/services/booking_service.py
"""
Booking Service.

Write path for bookings:
- Creating bookings (conflict-checked under a per-venue/date lock)
- Status transitions (confirm, complete)
- Recurring series generation
- Cancellation with the notice-window refund policy
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.config import settings
from ..core.exceptions import (
    AlreadyCancelled,
    BookingAlreadyStarted,
    BookingNotCancellable,
    BookingNotFound,
    ConflictDetected,
    InvalidStatusTransition,
    RecurrenceRangeTooLarge,
    RefundFailure,
    ValidationException,
)
from ..core.timezone_utils import venue_local_to_utc
from ..domain.cancellation_policy import decide_refund
from ..domain.interval import validate_interval
from ..domain.recurrence import default_end_date, recurrence_dates
from ..models.booking import Booking, BookingStatus, RecurringType
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..schemas.booking import BookingCreate, BookingRead, CancellationResult, RefundErrorInfo
from .base import BaseService
from .conflict_checker import ConflictChecker
from .payment_gateway import PaymentGateway, RefundOutcome, StripePaymentGateway

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """Service layer for booking writes."""

    def __init__(
        self,
        db: Session,
        conflict_checker: Optional[ConflictChecker] = None,
        payment_gateway: Optional[PaymentGateway] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(
            db, repository=self.repository, clock=self.clock
        )
        self._payment_gateway = payment_gateway

    @property
    def payment_gateway(self) -> PaymentGateway:
        if self._payment_gateway is None:
            self._payment_gateway = StripePaymentGateway()
        return self._payment_gateway

    # ------------------------------------------------------------------ helpers

    def _venue_timezone(self, venue_id: str) -> str:
        config = self.availability_repository.get_schedule_config(venue_id)
        return (config.timezone if config and config.timezone else None) or (
            settings.default_venue_timezone
        )

    def _get_booking_start_utc(self, booking: Booking) -> datetime:
        return venue_local_to_utc(
            booking.date, booking.start_time, self._venue_timezone(booking.venue_id)
        )

    def _validate_booking_window(
        self, venue_id: str, on_date: date, start_time: time, end_time: time
    ) -> None:
        """Duration bounds, no past starts, and the advance-booking horizon."""
        interval = validate_interval(on_date, start_time, end_time)

        duration = interval.duration_minutes
        if duration < settings.min_booking_duration_minutes:
            raise ValidationException(
                f"Booking must be at least {settings.min_booking_duration_minutes} minutes",
                code="BOOKING_TOO_SHORT",
                details={"duration_minutes": duration},
            )
        if duration > settings.max_booking_duration_minutes:
            raise ValidationException(
                f"Booking cannot exceed {settings.max_booking_duration_minutes} minutes",
                code="BOOKING_TOO_LONG",
                details={"duration_minutes": duration},
            )

        tz_name = self._venue_timezone(venue_id)
        if venue_local_to_utc(on_date, start_time, tz_name) <= self.clock.now():
            raise ValidationException(
                "Cannot book a time in the past",
                code="BOOKING_IN_PAST",
                details={"date": on_date.isoformat(), "start_time": start_time.isoformat()},
            )

        last_bookable = self.clock.today(tz_name) + timedelta(days=settings.max_advance_booking_days)
        if on_date > last_bookable:
            raise ValidationException(
                f"Bookings can be made at most {settings.max_advance_booking_days} days in advance",
                code="BOOKING_TOO_FAR_AHEAD",
                details={"date": on_date.isoformat(), "last_bookable_date": last_bookable.isoformat()},
            )

    def _load_for_update(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id, for_update=True)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    # ------------------------------------------------------------------ create

    @BaseService.measure_operation("create_booking")
    def create_booking(self, data: BookingCreate) -> Booking:
        """
        Create a pending booking, then its recurring children if requested.

        The conflict check and insert run in one transaction behind a
        per-venue/date lock, so two overlapping requests cannot both land.

        Raises:
            InvalidInterval: zero-length or inverted times
            ValidationException: duration or advance-window violation
            ConflictDetected: the interval overlaps an active booking
            RecurrenceRangeTooLarge: the recurrence window is too long
        """
        self._validate_booking_window(data.venue_id, data.date, data.start_time, data.end_time)

        if data.recurring_type != RecurringType.NONE:
            # Fail fast on an oversize series before anything is persisted
            self._recurrence_candidates(
                data.date, data.recurring_type.value, data.recurring_end_date
            )

        with self.transaction():
            self.lock_venue_date(data.venue_id, data.date)
            self.conflict_checker.ensure_no_conflict(
                data.venue_id, data.date, data.start_time, data.end_time
            )
            booking = self.repository.create(
                venue_id=data.venue_id,
                renter_id=data.renter_id,
                date=data.date,
                start_time=data.start_time,
                end_time=data.end_time,
                status=BookingStatus.PENDING.value,
                total_price=data.total_price,
                recurring_type=data.recurring_type.value,
                recurring_end_date=data.recurring_end_date,
                notes=data.notes,
            )

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            venue_id=booking.venue_id,
            booking_date=booking.date.isoformat(),
        )

        if booking.recurring_type != RecurringType.NONE.value:
            self.generate_recurring_bookings(booking)

        return booking

    # -------------------------------------------------------------- transitions

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: str) -> Booking:
        """
        Move a pending booking to confirmed.

        Conflicts are re-checked (excluding the booking itself) so a booking
        cannot be confirmed over one that landed in the meantime.
        """
        with self.transaction():
            booking = self._load_for_update(booking_id)
            if not booking.can_transition_to(BookingStatus.CONFIRMED.value):
                raise InvalidStatusTransition(
                    booking.id, booking.status, BookingStatus.CONFIRMED.value
                )
            self.lock_venue_date(booking.venue_id, booking.date)
            self.conflict_checker.ensure_no_conflict(
                booking.venue_id,
                booking.date,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            )
            booking.confirm(self.clock.now())

        self.log_operation("confirm_booking", booking_id=booking_id)
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: str) -> Booking:
        with self.transaction():
            booking = self._load_for_update(booking_id)
            if not booking.can_transition_to(BookingStatus.COMPLETED.value):
                raise InvalidStatusTransition(
                    booking.id, booking.status, BookingStatus.COMPLETED.value
                )
            booking.complete(self.clock.now())

        self.log_operation("complete_booking", booking_id=booking_id)
        return booking

    # ---------------------------------------------------------------- recurring

    def _recurrence_candidates(
        self, start: date, recurring_type: str, end_date: Optional[date]
    ) -> List[date]:
        end = end_date or default_end_date(
            start,
            recurring_type,
            daily_max_days=settings.recurring_daily_max_days,
            weekly_max_months=settings.recurring_weekly_max_months,
            monthly_max_months=settings.recurring_monthly_max_months,
        )
        cap = settings.max_recurring_instances
        dates = recurrence_dates(start, recurring_type, end, max_count=cap)
        if len(dates) > cap:
            raise RecurrenceRangeTooLarge(cap, recurring_type, end)
        return dates

    @BaseService.measure_operation("generate_recurring_bookings")
    def generate_recurring_bookings(self, parent: Booking) -> List[Booking]:
        """
        Create the children of a recurring booking.

        Each candidate date after the parent's is conflict-checked on its
        own; conflicting dates are skipped, so a partial series is a normal
        result. Dates past the advance-booking horizon are skipped the same
        way.

        Returns:
            The created child bookings, in date order

        Raises:
            RecurrenceRangeTooLarge: the series exceeds the instance cap
        """
        if parent.recurring_type == RecurringType.NONE.value:
            return []

        candidates = self._recurrence_candidates(
            parent.date, parent.recurring_type, parent.recurring_end_date
        )
        last_bookable = self.clock.today(self._venue_timezone(parent.venue_id)) + timedelta(
            days=settings.max_advance_booking_days
        )
        out_of_window = [d for d in candidates if d > last_bookable]
        candidates = [d for d in candidates if d <= last_bookable]

        created: List[Booking] = []
        skipped: List[date] = []
        with self.transaction():
            for candidate_date in candidates:
                self.lock_venue_date(parent.venue_id, candidate_date)
                try:
                    self.conflict_checker.ensure_no_conflict(
                        parent.venue_id, candidate_date, parent.start_time, parent.end_time
                    )
                except ConflictDetected:
                    skipped.append(candidate_date)
                    continue

                created.append(
                    self.repository.create(
                        venue_id=parent.venue_id,
                        renter_id=parent.renter_id,
                        date=candidate_date,
                        start_time=parent.start_time,
                        end_time=parent.end_time,
                        status=BookingStatus.PENDING.value,
                        total_price=parent.total_price,
                        recurring_type=RecurringType.NONE.value,
                        parent_booking_id=parent.id,
                    )
                )

        if skipped:
            self.logger.info(
                f"Skipped {len(skipped)} conflicting dates in recurring series {parent.id}: "
                f"{', '.join(d.isoformat() for d in skipped)}"
            )
        if out_of_window:
            self.logger.info(
                f"Skipped {len(out_of_window)} dates after {last_bookable.isoformat()} "
                f"in recurring series {parent.id}"
            )
        prometheus_metrics.record_recurring_result("created", len(created))
        prometheus_metrics.record_recurring_result("skipped_conflict", len(skipped))
        prometheus_metrics.record_recurring_result("skipped_out_of_window", len(out_of_window))
        return created

    # ------------------------------------------------------------- cancellation

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, booking_id: str, requester_id: str, *, owner_initiated: bool = False
    ) -> CancellationResult:
        """
        Cancel a booking and settle its refund.

        Uses a 3-phase pattern so no row lock is held during the processor call:
        - Phase 1: lock, validate, decide the refund, cancel and commit
        - Phase 2: issue the refund (no transaction)
        - Phase 3: record the refund outcome on the payment

        A refund failure never undoes the cancellation; it is returned in
        ``refund_error`` for reconciliation.

        Raises:
            BookingNotFound: unknown booking id
            AlreadyCancelled: the booking is already cancelled
            BookingNotCancellable: the booking is completed
            BookingAlreadyStarted: the booking start time has passed
        """
        # ========== PHASE 1: decide and cancel (short transaction) ==========
        with self.transaction():
            booking = self._load_for_update(booking_id)
            if booking.status == BookingStatus.CANCELLED.value:
                raise AlreadyCancelled(booking.id)
            if not booking.can_transition_to(BookingStatus.CANCELLED.value):
                raise BookingNotCancellable(booking.id, booking.status)

            payment = self.payment_repository.find_captured_for_booking(booking.id)
            now = self.clock.now()
            decision = decide_refund(
                now=now,
                starts_at=self._get_booking_start_utc(booking),
                captured_amount_cents=payment.amount_cents if payment else None,
                notice_hours=settings.cancellation_notice_hours,
                owner_initiated=owner_initiated,
            )
            if decision.hours_until_start <= 0:
                raise BookingAlreadyStarted(booking.id, decision.hours_until_start)
            payment_id = payment.id if payment else None
            payment_intent_id = payment.stripe_payment_intent_id if payment else None

            booking.cancel(requester_id, now)

        self.logger.info(
            f"Booking {booking_id} cancelled by {requester_id} "
            f"({decision.hours_until_start:.2f}h before start, refund={decision.reason})"
        )

        if not decision.refund_owed:
            prometheus_metrics.record_refund_decision(decision.reason)
            return CancellationResult(
                booking=BookingRead.model_validate(booking),
                refund_issued=False,
                refund_amount_cents=None,
                hours_until_start=decision.hours_until_start,
            )

        # ========== PHASE 2: processor call (NO transaction) ==========
        amount_cents = int(decision.amount_cents or 0)
        outcome = self._issue_refund(booking_id, payment_intent_id, amount_cents)

        # ========== PHASE 3: record outcome (short transaction) ==========
        with self.transaction():
            if outcome.success:
                self.payment_repository.mark_refunded(
                    payment_id, amount_cents, outcome.refund_id, self.clock.now()
                )
            else:
                self.payment_repository.mark_refund_failed(payment_id, outcome.error or "")

        refund_error = None
        if outcome.success:
            prometheus_metrics.record_refund_decision("refunded")
        else:
            prometheus_metrics.record_refund_decision("refund_failed")
            failure = RefundFailure(
                f"Refund for booking {booking_id} failed: {outcome.error}",
                retryable=outcome.retryable,
                details={"booking_id": booking_id, "payment_id": payment_id},
            )
            self.logger.error(failure.message)
            refund_error = RefundErrorInfo(
                code=failure.code, message=failure.message, retryable=failure.retryable
            )

        return CancellationResult(
            booking=BookingRead.model_validate(booking),
            refund_issued=outcome.success,
            refund_amount_cents=amount_cents,
            refund_id=outcome.refund_id,
            hours_until_start=decision.hours_until_start,
            refund_error=refund_error,
        )

    def _issue_refund(
        self, booking_id: str, payment_intent_id: Optional[str], amount_cents: int
    ) -> RefundOutcome:
        try:
            return self.payment_gateway.issue_refund(
                payment_intent_id=payment_intent_id,
                amount_cents=amount_cents,
                idempotency_key=f"refund:{booking_id}",
            )
        except Exception as e:
            # The cancellation is already committed; the failure is recorded on the payment
            self.logger.error(f"Payment gateway error refunding booking {booking_id}: {str(e)}")
            return RefundOutcome(False, error=str(e), retryable=True)
