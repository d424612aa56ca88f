"""Worker deletion core.

This module builds a whole-account picture of which resources are shared
between workers, plans the deletion of a worker's resources and executes it.

Classes:
    WorkerPurger: Main orchestrator for a deletion run
    ResourceIndex: Resource identity -> referencing workers map
    DeletionPlanner: Plan construction and name enrichment
    DeletionExecutor: Ordered, partial-failure-tolerant plan execution
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

from cfdelete.purge.audit import AuditStorage
from cfdelete.purge.executor import DeletionExecutor
from cfdelete.purge.index import ResourceIndex
from cfdelete.purge.planner import DeletionPlanner
from cfdelete.purge.purger import WorkerPurger

__all__ = [
    "WorkerPurger",
    "ResourceIndex",
    "DeletionPlanner",
    "DeletionExecutor",
    "AuditStorage",
]
