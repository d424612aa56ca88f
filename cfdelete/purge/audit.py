"""Audit storage for deletion runs.

Writes one YAML log per deletion run for troubleshooting and re-runs.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.deletion_result import DeletionResult

DEFAULT_AUDIT_DIR = Path.home() / ".config" / "cf-delete-worker" / "audit-logs"


class AuditStorage:
    """Audit log storage and retrieval.

    Stores one YAML file per deletion run, organized by year/month.

    Storage structure:
        ~/.config/cf-delete-worker/audit-logs/
            2026/
                10/
                    run-run_123.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.config/cf-delete-worker/audit-logs)
        """
        self.storage_dir = Path(storage_dir) if storage_dir else DEFAULT_AUDIT_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_run(
        self,
        plan: DeletionPlan,
        result: DeletionResult,
        account_id: str,
        run_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> Path:
        """Write the audit log for one deletion run.

        Overwrites an existing log with the same run id.

        Args:
            plan: Executed plan
            result: Execution result
            account_id: Account the run acted on
            run_id: Run identifier (default: generated)
            timestamp: Run time (default: now, UTC)

        Returns:
            Path of the written file
        """
        run_id = run_id or f"run_{uuid.uuid4()}"
        timestamp = timestamp or datetime.now(timezone.utc)

        month_dir = self.storage_dir / str(timestamp.year) / f"{timestamp.month:02d}"
        month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "worker_deletion",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "run": {
                "run_id": run_id,
                "timestamp": timestamp.isoformat(),
                "account_id": account_id,
                "worker": plan.worker.name,
                "dry_run": result.dry_run,
                "success": result.success,
            },
            "plan": plan.to_dict(),
            "result": result.to_dict(),
        }

        audit_file = month_dir / f"run-{run_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.safe_dump(audit_data, f, default_flow_style=False, sort_keys=False)
        return audit_file
