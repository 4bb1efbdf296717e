from __future__ import annotations

from datetime import date
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError

from venuebook.core.exceptions import RepositoryException, StorageFailure
from venuebook.monitoring.prometheus_metrics import REGISTRY
from venuebook.services.base import BaseService


class _Service(BaseService):
    @BaseService.measure_operation("do_work")
    def do_work(self, value: int) -> int:
        return value * 2

    @BaseService.measure_operation("explode")
    def explode(self) -> None:
        raise ValueError("nope")


def _sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestTransaction:
    def test_commits_on_success(self) -> None:
        db = Mock()
        with BaseService(db).transaction():
            pass
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_storage_errors_become_storage_failure(self) -> None:
        db = Mock()
        db.commit.side_effect = OperationalError("COMMIT", {}, Exception("db down"))

        with pytest.raises(StorageFailure) as exc_info:
            with BaseService(db).transaction():
                pass

        assert exc_info.value.code == "STORAGE_FAILURE"
        db.rollback.assert_called_once()

    def test_repository_errors_become_storage_failure(self) -> None:
        db = Mock()
        with pytest.raises(StorageFailure):
            with BaseService(db).transaction():
                raise RepositoryException("query failed")
        db.rollback.assert_called_once()

    def test_domain_errors_pass_through(self) -> None:
        db = Mock()
        with pytest.raises(ValueError):
            with BaseService(db).transaction():
                raise ValueError("business rule")
        db.rollback.assert_called_once()
        db.commit.assert_not_called()


class TestAdvisoryLock:
    def test_skipped_outside_postgres(self) -> None:
        db = Mock()
        db.get_bind.return_value.dialect.name = "sqlite"
        BaseService(db).lock_venue_date("venue-1", date(2026, 3, 10))
        db.execute.assert_not_called()

    def test_postgres_takes_transaction_lock(self) -> None:
        db = Mock()
        db.get_bind.return_value.dialect.name = "postgresql"
        service = BaseService(db)

        service.lock_venue_date("venue-1", date(2026, 3, 10))
        service.lock_venue_date("venue-1", date(2026, 3, 10))
        service.lock_venue_date("venue-1", date(2026, 3, 11))

        keys = [c.args[1]["key"] for c in db.execute.call_args_list]
        assert keys[0] == keys[1]
        assert keys[0] != keys[2]


class TestMeasureOperation:
    def test_records_success_and_error(self) -> None:
        labels = {"service": "_Service", "operation": "do_work", "status": "success"}
        error_labels = {"service": "_Service", "operation": "explode", "error_type": "ValueError"}
        before = _sample("venuebook_service_operations_total", labels)
        errors_before = _sample("venuebook_errors_total", error_labels)
        service = _Service(Mock())

        assert service.do_work(21) == 42
        with pytest.raises(ValueError):
            service.explode()

        assert _sample("venuebook_service_operations_total", labels) == before + 1
        assert _sample("venuebook_errors_total", error_labels) == errors_before + 1
        metrics = service.get_metrics()
        assert metrics["do_work"]["success_rate"] == 1.0
        assert metrics["explode"]["success_rate"] == 0.0

    def test_logs_slow_operations(self) -> None:
        service = _Service(Mock())
        with patch("venuebook.services.base.time.time", side_effect=[0.0, 2.0]):
            with patch.object(service.logger, "warning") as mock_warning:
                assert service.do_work(1) == 2
        mock_warning.assert_called_once()
