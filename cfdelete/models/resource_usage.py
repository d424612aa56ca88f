"""Resource usage model.

Tracks which workers reference a resource and how risky deleting it is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from cfdelete.models.binding import BindingType


class RiskLevel(IntEnum):
    """Ordered risk tiers for deleting a resource."""

    SAFE = 0
    CAUTION = 1
    DANGER = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass
class ResourceUsage:
    """Resource usage entity.

    Attributes:
        resource_key: Canonical identity (e.g. "kv:<namespace id>")
        resource_id: Identifier passed to delete calls
        resource_type: Binding kind of the resource
        resource_name: Best-effort display name
        used_by: Referencing worker names, in first-seen order, without duplicates
        risk_level: Risk computed against a target worker (default: SAFE)
    """

    resource_key: str
    resource_id: str
    resource_type: BindingType
    resource_name: str
    used_by: list[str] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.SAFE

    def add_user(self, worker_name: str) -> None:
        """Record a referencing worker, ignoring repeat sightings."""
        if worker_name not in self.used_by:
            self.used_by.append(worker_name)

    def other_users(self, target_worker: str) -> list[str]:
        return [name for name in self.used_by if name != target_worker]

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_key": self.resource_key,
            "resource_id": self.resource_id,
            "resource_type": self.resource_type.value,
            "resource_name": self.resource_name,
            "used_by": list(self.used_by),
            "risk_level": self.risk_level.label,
        }
