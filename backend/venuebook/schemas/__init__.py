from .availability import ComputedSlot
from .booking import (
    BookingCreate,
    BookingRead,
    CancellationResult,
    ConflictCheckResult,
    RefundErrorInfo,
)
from .template_sync import SyncRunResult

__all__ = [
    "BookingCreate",
    "BookingRead",
    "CancellationResult",
    "ComputedSlot",
    "ConflictCheckResult",
    "RefundErrorInfo",
    "SyncRunResult",
]
