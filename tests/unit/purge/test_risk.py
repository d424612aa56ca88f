"""Tests for risk classification."""

from __future__ import annotations

import pytest

from cfdelete.models.resource_usage import RiskLevel
from cfdelete.purge.risk import classify


class TestClassify:
    """Test suite for classify."""

    def test_empty_usage_is_safe(self) -> None:
        assert classify([], "billing-svc") == RiskLevel.SAFE

    def test_target_only_is_safe(self) -> None:
        assert classify(["billing-svc"], "billing-svc") == RiskLevel.SAFE

    def test_target_is_excluded_from_count(self) -> None:
        """The target worker's own reference never counts against it."""
        assert classify(["billing-svc", "a", "b"], "billing-svc") == RiskLevel.CAUTION
        assert classify(["a", "b"], "billing-svc") == RiskLevel.CAUTION

    def test_repeated_target_references_stay_safe(self) -> None:
        assert classify(["billing-svc", "billing-svc", "billing-svc"], "billing-svc") == RiskLevel.SAFE

    def test_repeated_other_worker_counts_once(self) -> None:
        assert classify(["a", "a", "a"], "billing-svc") == RiskLevel.CAUTION

    @pytest.mark.parametrize(
        "others, expected",
        [
            (0, RiskLevel.SAFE),
            (1, RiskLevel.CAUTION),
            (2, RiskLevel.CAUTION),
            (3, RiskLevel.DANGER),
            (10, RiskLevel.DANGER),
        ],
    )
    def test_thresholds(self, others: int, expected: RiskLevel) -> None:
        used_by = ["target"] + [f"w{i}" for i in range(others)]

        assert classify(used_by, "target") == expected

    def test_monotonic_in_other_workers(self) -> None:
        used_by = ["target"]
        previous = classify(used_by, "target")

        for i in range(6):
            used_by.append(f"w{i}")
            level = classify(used_by, "target")
            assert level >= previous
            previous = level

        while len(used_by) > 1:
            used_by.pop()
            level = classify(used_by, "target")
            assert level <= previous
            previous = level

    def test_other_workers_without_target(self) -> None:
        """Usage sets from an index that never saw the target still classify on others only."""
        assert classify(["a", "b", "c"], "target") == RiskLevel.DANGER
