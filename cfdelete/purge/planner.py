"""Deletion plan construction.

Turns a target worker's bindings plus the whole-account index into an
ordered, policy-filtered list of resources to delete.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from cfdelete.cloudflare.errors import CloudflareError
from cfdelete.models.binding import Binding, BindingType, resource_key
from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.resource_usage import ResourceUsage, RiskLevel
from cfdelete.models.worker import WorkerInfo
from cfdelete.purge.index import ResourceIndex
from cfdelete.purge.risk import classify

logger = logging.getLogger(__name__)

NameLookup = Callable[[BindingType, str], Optional[str]]


class DeletionPlanner:
    """Builds deletion plans.

    Attributes:
        name_lookup: Optional (kind, resource_id) -> display name callable used to
            enrich planned resources
    """

    def __init__(self, name_lookup: Optional[NameLookup] = None) -> None:
        self.name_lookup = name_lookup
        self._name_cache: dict[str, Optional[str]] = {}

    def build_plan(
        self,
        worker: WorkerInfo,
        index: Optional[ResourceIndex] = None,
        exclusive_only: bool = False,
        delete_shared: bool = False,
    ) -> DeletionPlan:
        """Build the deletion plan for a worker.

        Each resource reachable from the worker's bindings appears at most once,
        in binding order. Resources absent from the index (or all of them, when
        no index is given) are treated as used by the target alone.

        Args:
            worker: Target worker with bindings loaded
            index: Whole-account index (optional)
            exclusive_only: Drop every resource above SAFE
            delete_shared: Whether included shared resources get deleted;
                forced off in exclusive-only mode

        Returns:
            DeletionPlan
        """
        plan = DeletionPlan(
            worker=worker,
            delete_shared=delete_shared and not exclusive_only,
            exclusive_only=exclusive_only,
        )

        seen: set[str] = set()
        for binding in worker.bindings:
            key = resource_key(binding)
            if key is None or key in seen:
                continue
            seen.add(key)

            usage = self._usage_for(binding, key, worker.name, index)
            usage.risk_level = classify(usage.used_by, worker.name)

            if exclusive_only and usage.risk_level > RiskLevel.SAFE:
                logger.debug(f"Excluding shared resource {usage.resource_name} ({usage.risk_level.label})")
                continue

            usage.resource_name = self._enrich_name(binding, usage)
            plan.resources_to_delete.append(usage)

        plan.has_shared_resources = any(r.risk_level > RiskLevel.SAFE for r in plan.resources_to_delete)
        return plan

    def _usage_for(
        self,
        binding: Binding,
        key: str,
        worker_name: str,
        index: Optional[ResourceIndex],
    ) -> ResourceUsage:
        """Copy the indexed usage for key, or synthesise a target-only one."""
        indexed = index.get(key) if index is not None else None
        if indexed is not None:
            return replace(indexed, used_by=list(indexed.used_by))

        return ResourceUsage(
            resource_key=key,
            resource_id=binding.resource_id,
            resource_type=binding.binding_type,
            resource_name=binding.provisional_name,
            used_by=[worker_name],
        )

    def _enrich_name(self, binding: Binding, usage: ResourceUsage) -> str:
        """Replace a placeholder display name with the provider's name.

        Lookup failures keep the provisional name.
        """
        current = usage.resource_name
        if self.name_lookup is None or binding.has_display_name:
            return current

        if usage.resource_key not in self._name_cache:
            try:
                self._name_cache[usage.resource_key] = self.name_lookup(usage.resource_type, usage.resource_id)
            except (CloudflareError, KeyError, TypeError) as e:
                logger.debug(f"Name lookup failed for {usage.resource_key}: {e}")
                self._name_cache[usage.resource_key] = None

        return self._name_cache[usage.resource_key] or current
