"""Tests for ResourceUsage, DeletionPlan and DeletionRecord models."""

from __future__ import annotations

import pytest

from cfdelete.models.binding import BindingType
from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.deletion_result import DeletionRecord, DeletionResult, DeletionStatus
from cfdelete.models.resource_usage import ResourceUsage, RiskLevel
from tests.fixtures.workers import make_worker


def _usage(key: str = "kv:ns-1", risk: RiskLevel = RiskLevel.SAFE) -> ResourceUsage:
    return ResourceUsage(
        resource_key=key,
        resource_id=key.split(":", 1)[1],
        resource_type=BindingType.KV,
        resource_name="cache",
        risk_level=risk,
    )


class TestResourceUsage:
    """Test suite for ResourceUsage."""

    def test_add_user_deduplicates_and_keeps_order(self) -> None:
        usage = _usage()

        usage.add_user("a")
        usage.add_user("b")
        usage.add_user("a")

        assert usage.used_by == ["a", "b"]

    def test_other_users_excludes_target(self) -> None:
        usage = _usage()
        usage.used_by = ["billing-svc", "reports-svc"]

        assert usage.other_users("billing-svc") == ["reports-svc"]

    def test_risk_levels_are_ordered(self) -> None:
        assert RiskLevel.SAFE < RiskLevel.CAUTION < RiskLevel.DANGER
        assert RiskLevel.CAUTION.label == "Caution"

    def test_to_dict(self) -> None:
        usage = _usage(risk=RiskLevel.DANGER)
        usage.used_by = ["a"]

        data = usage.to_dict()

        assert data["resource_type"] == "kv_namespace"
        assert data["risk_level"] == "Danger"
        assert data["used_by"] == ["a"]


class TestDeletionPlan:
    """Test suite for DeletionPlan."""

    def test_will_delete_safe_resources_always(self) -> None:
        plan = DeletionPlan(worker=make_worker("w"), delete_shared=False)

        assert plan.will_delete(_usage(risk=RiskLevel.SAFE)) is True
        assert plan.will_delete(_usage(risk=RiskLevel.CAUTION)) is False

    def test_will_delete_shared_when_allowed(self) -> None:
        plan = DeletionPlan(worker=make_worker("w"), delete_shared=True)

        assert plan.will_delete(_usage(risk=RiskLevel.DANGER)) is True

    def test_shared_resources(self) -> None:
        safe = _usage("kv:a")
        shared = _usage("kv:b", risk=RiskLevel.CAUTION)
        plan = DeletionPlan(worker=make_worker("w"), resources_to_delete=[safe, shared])

        assert plan.shared_resources == [shared]

    def test_to_dict_contains_policy_flags(self) -> None:
        plan = DeletionPlan(worker=make_worker("w"), exclusive_only=True)

        data = plan.to_dict()

        assert data["worker"]["name"] == "w"
        assert data["exclusive_only"] is True
        assert data["delete_shared"] is False
        assert data["resources_to_delete"] == []


class TestDeletionRecord:
    """Test suite for DeletionRecord validation."""

    def _record(self, status: DeletionStatus, **kwargs) -> DeletionRecord:
        return DeletionRecord(
            resource_name="cache", resource_id="ns-1", resource_type=BindingType.KV, status=status, **kwargs
        )

    def test_valid_records(self) -> None:
        assert self._record(DeletionStatus.SUCCEEDED).validate() is True
        assert self._record(DeletionStatus.FAILED, error_message="boom").validate() is True
        assert self._record(DeletionStatus.SKIPPED, skip_reason="shared").validate() is True

    def test_failed_requires_error_message(self) -> None:
        with pytest.raises(ValueError, match="error_message"):
            self._record(DeletionStatus.FAILED).validate()

    def test_skipped_requires_reason(self) -> None:
        with pytest.raises(ValueError, match="skip_reason"):
            self._record(DeletionStatus.SKIPPED).validate()

    def test_succeeded_rejects_error(self) -> None:
        with pytest.raises(ValueError):
            self._record(DeletionStatus.SUCCEEDED, error_message="boom").validate()


class TestDeletionResult:
    """Test suite for DeletionResult."""

    def test_defaults(self) -> None:
        result = DeletionResult()

        assert result.success is True
        assert result.worker_deleted is False
        assert result.resources_deleted == []
        assert result.errors == []

    def test_to_dict_stringifies_errors(self) -> None:
        result = DeletionResult(success=False, errors=[RuntimeError("boom")])

        assert result.to_dict()["errors"] == ["boom"]
