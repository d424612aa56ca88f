"""Worker purge orchestrator.

Runs the full pipeline for one worker: fetch the target, scan the account,
build the plan, execute it and write the audit log.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import yaml

from cfdelete.cloudflare.errors import CloudflareError
from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.deletion_result import DeletionResult
from cfdelete.models.worker import WorkerInfo
from cfdelete.purge.audit import AuditStorage
from cfdelete.purge.executor import DeletionExecutor
from cfdelete.purge.index import ProgressCallback, ResourceIndex, ResourceIndexBuilder
from cfdelete.purge.planner import DeletionPlanner

logger = logging.getLogger(__name__)


class WorkerPurger:
    """Worker purge orchestrator.

    Attributes:
        client: Cloudflare client
        max_workers: Thread pool size for the account scan
        audit_storage: Audit log storage, None to disable audit logs
        planner: Deletion planner wired to the client's name lookup
    """

    def __init__(self, client, max_workers: int = 8, audit_storage: Optional[AuditStorage] = None) -> None:
        self.client = client
        self.max_workers = max_workers
        self.audit_storage = audit_storage
        self.planner = DeletionPlanner(name_lookup=client.lookup_display_name)

    def analyze(
        self,
        worker_name: str,
        skip_dependency_check: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> tuple[WorkerInfo, Optional[ResourceIndex]]:
        """Fetch the target worker and scan the account for shared resources.

        Args:
            worker_name: Worker to delete
            skip_dependency_check: Skip the account scan (every resource then
                counts as exclusive)
            progress_callback: Scan progress callback
            cancel_event: Scan cancellation flag

        Returns:
            Tuple of (target worker, index or None when the scan was skipped)

        Raises:
            WorkerNotFoundError: If the worker does not exist
            ScanCancelledError: If the scan was cancelled
        """
        worker = self.client.get_worker(worker_name)
        logger.debug(f"Worker {worker_name} has {len(worker.bindings)} binding(s)")

        if skip_dependency_check:
            logger.warning("Dependency check skipped; shared resources will not be detected")
            return worker, None

        workers = self.client.list_workers()
        builder = ResourceIndexBuilder(self.client, max_workers=self.max_workers)
        index = builder.build(workers, progress_callback=progress_callback, cancel_event=cancel_event)

        if index.skipped_workers:
            logger.warning(
                f"{len(index.skipped_workers)} worker(s) could not be scanned; resources they share "
                f"with {worker_name} may be reported as exclusive: {', '.join(index.skipped_workers)}"
            )
        return worker, index

    def plan(
        self,
        worker: WorkerInfo,
        index: Optional[ResourceIndex],
        exclusive_only: bool = False,
        delete_shared: bool = False,
    ) -> DeletionPlan:
        return self.planner.build_plan(worker, index, exclusive_only=exclusive_only, delete_shared=delete_shared)

    def execute(
        self,
        plan: DeletionPlan,
        dry_run: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> DeletionResult:
        """Execute a plan and record it in the audit log.

        Dry runs are never logged. A failed audit write is logged and does not
        affect the returned result.
        """
        executor = DeletionExecutor(self.client, dry_run=dry_run)
        result = executor.execute(plan, cancel_event=cancel_event)

        if self.audit_storage is not None and not dry_run:
            try:
                audit_file = self.audit_storage.log_run(plan, result, account_id=self.client.get_account_id())
            except (OSError, yaml.YAMLError, CloudflareError) as e:
                logger.error(f"Failed to write audit log for worker {plan.worker.name}: {e}")
            else:
                logger.debug(f"Audit log written to {audit_file}")

        return result
