"""
Prometheus metrics for the scheduling engine.

Service timings come from the @measure_operation decorator; the domain
counters below cover template sync outcomes, refund decisions and
recurring series generation.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Private registry so importing the package never touches the global default
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "venuebook_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "venuebook_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "venuebook_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

template_sync_total = Counter(
    "venuebook_template_sync_total",
    "Template sync queue entries by terminal status",
    ["status"],  # done | failed
    registry=REGISTRY,
)

template_sync_refreshed_rows_total = Counter(
    "venuebook_template_sync_refreshed_rows_total",
    "Slot instance rows inserted or deleted by template sync",
    ["change"],  # inserted | deleted
    registry=REGISTRY,
)

refund_decisions_total = Counter(
    "venuebook_refund_decisions_total",
    "Cancellation refund decisions",
    ["outcome"],  # refunded | late_cancellation | not_captured | refund_failed
    registry=REGISTRY,
)

recurring_bookings_total = Counter(
    "venuebook_recurring_bookings_total",
    "Recurring series candidates by result",
    ["result"],  # created | skipped_conflict | skipped_out_of_window
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Static recording helpers over the module registry."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation name (e.g., 'cancel_booking')
            duration: Operation duration in seconds
            status: 'success' or 'error'
            error_type: Exception class name if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_template_sync(status: str, inserted: int = 0, deleted: int = 0) -> None:
        template_sync_total.labels(status=status).inc()
        if inserted:
            template_sync_refreshed_rows_total.labels(change="inserted").inc(inserted)
        if deleted:
            template_sync_refreshed_rows_total.labels(change="deleted").inc(deleted)

    @staticmethod
    def record_refund_decision(outcome: str) -> None:
        refund_decisions_total.labels(outcome=outcome).inc()

    @staticmethod
    def record_recurring_result(result: str, count: int = 1) -> None:
        if count > 0:
            recurring_bookings_total.labels(result=result).inc(count)

    @staticmethod
    def get_metrics() -> bytes:
        """Metrics in Prometheus text exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
