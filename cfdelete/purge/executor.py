"""Deletion plan execution.

Deletes the worker script first and only then its planned resources. A
failed worker delete stops the run before any resource is touched; a failed
resource delete is recorded and the remaining resources are still processed.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.deletion_result import DeletionRecord, DeletionResult, DeletionStatus
from cfdelete.models.resource_usage import ResourceUsage
from cfdelete.purge.deleter import ResourceDeleter

logger = logging.getLogger(__name__)


class DeletionError(Exception):
    """A single failed step of a deletion run.

    Attributes:
        resource_name: Worker or resource the step acted on
    """

    def __init__(self, message: str, resource_name: str) -> None:
        super().__init__(message)
        self.resource_name = resource_name


class WorkerDeletionError(DeletionError):
    """The worker script could not be deleted."""


class ResourceDeletionError(DeletionError):
    """A planned resource could not be deleted."""


class DeletionCancelledError(DeletionError):
    """The run was cancelled before this step was attempted."""


class DeletionExecutor:
    """Executes deletion plans.

    Attributes:
        deleter: Per-kind delete dispatcher
        dry_run: Report the plan as deleted without any remote call
    """

    def __init__(self, client, dry_run: bool = False) -> None:
        """Initialize executor.

        Args:
            client: Cloudflare client (or any object with the same delete methods)
            dry_run: Simulate instead of deleting (default: False)
        """
        self.deleter = ResourceDeleter(client)
        self.dry_run = dry_run

    def execute(self, plan: DeletionPlan, cancel_event: Optional[threading.Event] = None) -> DeletionResult:
        """Execute a deletion plan.

        Args:
            plan: Plan to carry out
            cancel_event: When set, no further delete call is started

        Returns:
            DeletionResult describing every planned item
        """
        if self.dry_run:
            return self._simulate(plan)

        result = DeletionResult()
        worker_name = plan.worker.name

        if cancel_event is not None and cancel_event.is_set():
            result.success = False
            result.errors.append(DeletionCancelledError("Deletion cancelled before start", worker_name))
            return result

        # Step 1: the worker script; its resources must outlive it
        success, error_message = self.deleter.delete_worker(worker_name)
        if not success:
            result.success = False
            result.errors.append(
                WorkerDeletionError(f"Failed to delete worker {worker_name}: {error_message}", worker_name)
            )
            return result
        result.worker_deleted = True

        # Step 2: planned resources, in plan order
        for position, resource in enumerate(plan.resources_to_delete):
            if cancel_event is not None and cancel_event.is_set():
                self._cancel_remaining(result, plan.resources_to_delete[position:])
                break

            if not plan.will_delete(resource):
                result.resources_skipped.append(resource.resource_name)
                result.records.append(
                    self._record(
                        resource,
                        DeletionStatus.SKIPPED,
                        skip_reason=f"Shared with {len(resource.other_users(worker_name))} other worker(s)",
                    )
                )
                continue

            self._delete_one(result, resource)

        if result.errors:
            result.success = False

        logger.info(
            f"Deleted worker {worker_name}: {len(result.resources_deleted)} resource(s) deleted, "
            f"{len(result.resources_skipped)} skipped, {len(result.errors)} error(s)"
        )
        return result

    def _delete_one(self, result: DeletionResult, resource: ResourceUsage) -> None:
        success, error_message = self.deleter.delete_resource(resource.resource_type, resource.resource_id)

        if success:
            note = self.deleter.NO_OP_REASONS.get(resource.resource_type)
            result.resources_deleted.append(resource.resource_name)
            result.records.append(self._record(resource, DeletionStatus.SUCCEEDED, note=note))
            return

        message = f"Failed to delete {resource.resource_type.value} {resource.resource_name}: {error_message}"
        result.errors.append(ResourceDeletionError(message, resource.resource_name))
        result.resources_skipped.append(resource.resource_name)
        result.records.append(self._record(resource, DeletionStatus.FAILED, error_message=error_message))

    def _cancel_remaining(self, result: DeletionResult, remaining: list[ResourceUsage]) -> None:
        logger.warning(f"Deletion cancelled with {len(remaining)} resource(s) not attempted")
        for resource in remaining:
            result.resources_skipped.append(resource.resource_name)
            result.records.append(self._record(resource, DeletionStatus.SKIPPED, skip_reason="Cancelled"))
        result.errors.append(
            DeletionCancelledError(
                f"Deletion cancelled, {len(remaining)} resource(s) not attempted",
                remaining[0].resource_name,
            )
        )

    def _simulate(self, plan: DeletionPlan) -> DeletionResult:
        result = DeletionResult(worker_deleted=True, dry_run=True)
        for resource in plan.resources_to_delete:
            result.resources_deleted.append(resource.resource_name)
            result.records.append(self._record(resource, DeletionStatus.SUCCEEDED, note="Dry run"))
        return result

    @staticmethod
    def _record(resource: ResourceUsage, status: DeletionStatus, **kwargs: Optional[str]) -> DeletionRecord:
        return DeletionRecord(
            resource_name=resource.resource_name,
            resource_id=resource.resource_id,
            resource_type=resource.resource_type,
            status=status,
            **kwargs,
        )
