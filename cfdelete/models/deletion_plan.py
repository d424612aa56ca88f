"""Deletion plan model.

Describes what a run will delete for a single target worker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cfdelete.models.resource_usage import ResourceUsage, RiskLevel
from cfdelete.models.worker import WorkerInfo


@dataclass
class DeletionPlan:
    """Deletion plan entity.

    Policy flags:
        exclusive_only: Resources above SAFE are never included in the plan
        delete_shared: Outside exclusive-only mode, whether included CAUTION/DANGER
            resources are actually deleted or only reported as skipped

    Attributes:
        worker: Target worker snapshot
        resources_to_delete: Planned resources in plan order
        has_shared_resources: True if any included resource is above SAFE
        delete_shared: See policy flags (default: False)
        exclusive_only: See policy flags (default: False)
    """

    worker: WorkerInfo
    resources_to_delete: list[ResourceUsage] = field(default_factory=list)
    has_shared_resources: bool = False
    delete_shared: bool = False
    exclusive_only: bool = False

    @property
    def shared_resources(self) -> list[ResourceUsage]:
        return [r for r in self.resources_to_delete if r.risk_level > RiskLevel.SAFE]

    def will_delete(self, resource: ResourceUsage) -> bool:
        """Whether execution would attempt to delete the given planned resource."""
        return resource.risk_level == RiskLevel.SAFE or self.delete_shared

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker": self.worker.to_dict(),
            "resources_to_delete": [r.to_dict() for r in self.resources_to_delete],
            "has_shared_resources": self.has_shared_resources,
            "delete_shared": self.delete_shared,
            "exclusive_only": self.exclusive_only,
        }
