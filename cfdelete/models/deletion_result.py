"""Deletion result model.

Outcome of one deletion run, with a record per planned resource.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from cfdelete.models.binding import BindingType


class DeletionStatus(Enum):
    """Individual resource deletion status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Validation rules:
        - status=succeeded: no error_message or skip_reason
        - status=failed: requires error_message
        - status=skipped: requires skip_reason

    Attributes:
        resource_name: Display name of the resource
        resource_id: Identifier the delete call used
        resource_type: Binding kind
        status: Outcome
        error_message: Failure description (optional)
        skip_reason: Why the resource was not deleted (optional)
        note: Extra detail, e.g. that no backing store exists (optional)
    """

    resource_name: str
    resource_id: str
    resource_type: BindingType
    status: DeletionStatus
    error_message: Optional[str] = None
    skip_reason: Optional[str] = None
    note: Optional[str] = None

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_message:
                raise ValueError("Failed status requires error_message")
        elif self.status == DeletionStatus.SKIPPED:
            if not self.skip_reason:
                raise ValueError("Skipped status requires skip_reason")
        elif self.status == DeletionStatus.SUCCEEDED:
            if self.error_message or self.skip_reason:
                raise ValueError("Succeeded status cannot have error or skip reason")

        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_name": self.resource_name,
            "resource_id": self.resource_id,
            "resource_type": self.resource_type.value,
            "status": self.status.value,
            "error_message": self.error_message,
            "skip_reason": self.skip_reason,
            "note": self.note,
        }


@dataclass
class DeletionResult:
    """Deletion result entity.

    Attributes:
        success: False if the worker delete failed or any resource error was recorded
        worker_deleted: Whether the worker script itself was deleted
        resources_deleted: Display names of resources deleted
        resources_skipped: Display names skipped by policy or per-item failure
        errors: Errors in the order they were encountered
        records: Per-resource outcomes in plan order
        dry_run: Whether the result was simulated
    """

    success: bool = True
    worker_deleted: bool = False
    resources_deleted: list[str] = field(default_factory=list)
    resources_skipped: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    records: list[DeletionRecord] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "worker_deleted": self.worker_deleted,
            "dry_run": self.dry_run,
            "resources_deleted": list(self.resources_deleted),
            "resources_skipped": list(self.resources_skipped),
            "errors": [str(e) for e in self.errors],
            "records": [r.to_dict() for r in self.records],
        }
