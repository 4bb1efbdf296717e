from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from venuebook.core.exceptions import RepositoryException
from venuebook.models import SyncStatus, TemplateSyncQueueEntry
from venuebook.repositories.template_sync_repository import TemplateSyncRepository

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
STALE_BEFORE = T0 - timedelta(minutes=15)


@pytest.fixture
def repo(db) -> TemplateSyncRepository:
    return TemplateSyncRepository(db)


class TestEnqueue:
    def test_one_row_per_venue(self, repo, db) -> None:
        repo.enqueue("venue-1", T0, "created")
        repo.enqueue("venue-1", T0 + timedelta(minutes=5), "edited")

        rows = db.query(TemplateSyncQueueEntry).all()
        assert len(rows) == 1
        assert rows[0].status == SyncStatus.PENDING.value
        assert rows[0].reason == "edited"

    def test_done_entry_flips_back_to_pending(self, repo) -> None:
        repo.enqueue("venue-1", T0)
        repo.claim_pending(10, T0, STALE_BEFORE)
        assert repo.mark_done("venue-1", T0, T0) is True

        repo.enqueue("venue-1", T0 + timedelta(hours=1), "edited")

        entry = repo.get("venue-1")
        assert entry.status == SyncStatus.PENDING.value
        assert entry.last_error is None


class TestClaimPending:
    def test_claim_marks_processing(self, repo) -> None:
        repo.enqueue("venue-1", T0)

        claimed = repo.claim_pending(10, T0, STALE_BEFORE)

        assert [e.venue_id for e in claimed] == ["venue-1"]
        assert claimed[0].status == SyncStatus.PROCESSING.value
        assert claimed[0].attempt_count == 1
        assert claimed[0].started_at == T0

    def test_processing_entries_are_not_claimed_twice(self, repo) -> None:
        repo.enqueue("venue-1", T0)
        repo.claim_pending(10, T0, STALE_BEFORE)
        assert repo.claim_pending(10, T0, STALE_BEFORE) == []

    def test_done_entries_are_not_claimed(self, repo) -> None:
        repo.enqueue("venue-1", T0)
        repo.claim_pending(10, T0, STALE_BEFORE)
        repo.mark_done("venue-1", T0, T0)
        assert repo.claim_pending(10, T0, STALE_BEFORE) == []

    def test_orders_by_request_time_then_venue(self, repo) -> None:
        repo.enqueue("venue-z", T0)
        repo.enqueue("venue-b", T0 + timedelta(seconds=1))
        repo.enqueue("venue-a", T0 + timedelta(seconds=1))

        claimed = repo.claim_pending(2, T0, STALE_BEFORE)

        assert [e.venue_id for e in claimed] == ["venue-z", "venue-a"]


class TestCompareAndSet:
    def test_reenqueue_during_processing_is_preserved(self, repo) -> None:
        repo.enqueue("venue-1", T0)
        repo.claim_pending(10, T0, STALE_BEFORE)
        repo.enqueue("venue-1", T0 + timedelta(minutes=1), "edited")

        assert repo.mark_done("venue-1", T0, T0 + timedelta(minutes=2)) is False

        entry = repo.get("venue-1")
        assert entry.status == SyncStatus.PENDING.value
        assert entry.reason == "edited"
        assert [e.venue_id for e in repo.claim_pending(10, T0, STALE_BEFORE)] == ["venue-1"]

    def test_mark_failed_truncates_error(self, repo) -> None:
        repo.enqueue("venue-1", T0)
        repo.claim_pending(10, T0, STALE_BEFORE)

        assert repo.mark_failed("venue-1", T0, "x" * 5000, T0) is True

        entry = repo.get("venue-1")
        assert entry.status == SyncStatus.FAILED.value
        assert len(entry.last_error) == 1000

    def test_unknown_venue(self, repo) -> None:
        assert repo.mark_done("venue-missing", T0, T0) is False


class TestErrors:
    def test_storage_errors_become_repository_exceptions(self) -> None:
        db = Mock()
        db.get_bind.return_value.dialect.name = "sqlite"
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        repo = TemplateSyncRepository(db)

        with pytest.raises(RepositoryException):
            repo.claim_pending(10, T0, STALE_BEFORE)
        with pytest.raises(RepositoryException):
            repo.mark_done("venue-1", T0, T0)
