"""
Template sync queue.

One row per venue: editing a venue's templates flips its row back to
``pending``; the materializer claims pending rows in batches.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from ..database import Base


class SyncStatus(str, Enum):
    """Lifecycle states for a queue entry."""

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class TemplateSyncQueueEntry(Base):
    __tablename__ = "template_sync_queue"

    venue_id = Column(String(64), primary_key=True)
    status = Column(String(20), nullable=False, default=SyncStatus.PENDING.value)
    reason = Column(String(255), nullable=True)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    attempt_count = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)

    __table_args__ = (Index("idx_template_sync_queue_status_requested", "status", "requested_at"),)

    def __repr__(self) -> str:
        return f"<TemplateSyncQueueEntry {self.venue_id} {self.status}>"
