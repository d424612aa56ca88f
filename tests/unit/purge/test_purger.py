"""Tests for WorkerPurger orchestration."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from cfdelete.cloudflare.errors import TransientNetworkError, WorkerNotFoundError
from cfdelete.models.resource_usage import RiskLevel
from cfdelete.purge.audit import AuditStorage
from cfdelete.purge.purger import WorkerPurger
from tests.fixtures.workers import FakeCatalog, d1_binding, kv_binding


@pytest.fixture
def catalog() -> FakeCatalog:
    catalog = FakeCatalog(
        {
            "billing-svc": [kv_binding("ns-1", name="CACHE"), d1_binding("db-7")],
            "reports-svc": [kv_binding("ns-1", name="REPORTS")],
        }
    )
    catalog.display_names["ns-1"] = "billing-cache"
    catalog.display_names["db-7"] = "billing-db"
    return catalog


class TestWorkerPurger:
    """Test suite for WorkerPurger."""

    def test_analyze_scans_account(self, catalog: FakeCatalog) -> None:
        worker, index = WorkerPurger(catalog).analyze("billing-svc")

        assert worker.name == "billing-svc"
        assert index is not None
        assert index.get("kv:ns-1").used_by == ["billing-svc", "reports-svc"]

    def test_analyze_unknown_worker(self, catalog: FakeCatalog) -> None:
        with pytest.raises(WorkerNotFoundError):
            WorkerPurger(catalog).analyze("ghost")

    def test_analyze_skip_dependency_check(self, catalog: FakeCatalog) -> None:
        worker, index = WorkerPurger(catalog).analyze("billing-svc", skip_dependency_check=True)

        assert index is None
        assert catalog.calls_to("list_workers") == []

    def test_skipped_scan_worker_hides_sharing(self, catalog: FakeCatalog) -> None:
        """A worker whose bindings could not be read contributes no references."""
        catalog.binding_errors["reports-svc"] = TransientNetworkError("timeout")
        purger = WorkerPurger(catalog)

        worker, index = purger.analyze("billing-svc")
        plan = purger.plan(worker, index)

        assert index.skipped_workers == ["reports-svc"]
        assert all(r.risk_level == RiskLevel.SAFE for r in plan.resources_to_delete)

    def test_plan_enriches_names(self, catalog: FakeCatalog) -> None:
        purger = WorkerPurger(catalog)
        worker, index = purger.analyze("billing-svc")

        plan = purger.plan(worker, index)

        assert [r.resource_name for r in plan.resources_to_delete] == ["billing-cache", "billing-db"]
        assert plan.resources_to_delete[0].risk_level == RiskLevel.CAUTION

    def test_execute_writes_audit_log(self, catalog: FakeCatalog, tmp_path: Path) -> None:
        audit = AuditStorage(str(tmp_path / "audit"))
        purger = WorkerPurger(catalog, audit_storage=audit)
        worker, index = purger.analyze("billing-svc")

        result = purger.execute(purger.plan(worker, index, exclusive_only=True))

        assert result.success is True
        logs = list((tmp_path / "audit").glob("*/*/run-*.yaml"))
        assert len(logs) == 1
        with open(logs[0]) as f:
            assert yaml.safe_load(f)["run"]["worker"] == "billing-svc"

    def test_dry_run_is_not_audited(self, catalog: FakeCatalog, tmp_path: Path) -> None:
        audit = AuditStorage(str(tmp_path / "audit"))
        purger = WorkerPurger(catalog, audit_storage=audit)
        worker, index = purger.analyze("billing-svc")

        result = purger.execute(purger.plan(worker, index), dry_run=True)

        assert result.dry_run is True
        assert list((tmp_path / "audit").glob("*/*/run-*.yaml")) == []
        assert catalog.delete_calls == []

    def test_audit_write_failure_keeps_result(self, catalog: FakeCatalog) -> None:
        """Deletes that already happened are reported even if the audit log cannot be written."""
        audit = Mock(spec=AuditStorage)
        audit.log_run.side_effect = PermissionError("audit dir not writable")
        purger = WorkerPurger(catalog, audit_storage=audit)
        worker, index = purger.analyze("billing-svc")

        result = purger.execute(purger.plan(worker, index, exclusive_only=True))

        assert result.success is True
        assert result.worker_deleted is True
        assert result.resources_deleted == ["billing-db"]
        audit.log_run.assert_called_once()
