"""Domain models for worker deletion."""

from __future__ import annotations

from cfdelete.models.binding import Binding, BindingType, resource_key
from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.deletion_result import DeletionRecord, DeletionResult, DeletionStatus
from cfdelete.models.resource_usage import ResourceUsage, RiskLevel
from cfdelete.models.worker import WorkerInfo

__all__ = [
    "Binding",
    "BindingType",
    "DeletionPlan",
    "DeletionRecord",
    "DeletionResult",
    "DeletionStatus",
    "ResourceUsage",
    "RiskLevel",
    "WorkerInfo",
    "resource_key",
]
