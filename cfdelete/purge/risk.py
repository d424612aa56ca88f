"""Risk classification for deleting a shared resource."""

from __future__ import annotations

from typing import Iterable

from cfdelete.models.resource_usage import RiskLevel

# Up to this many other referencing workers is CAUTION, more is DANGER
CAUTION_MAX_OTHER_WORKERS = 2


def classify(used_by: Iterable[str], target_worker: str) -> RiskLevel:
    """Classify the risk of deleting a resource on behalf of target_worker.

    Only distinct workers other than the target count; the target's own
    references never raise the level.

    Args:
        used_by: Names of workers referencing the resource (may repeat)
        target_worker: Worker being deleted

    Returns:
        SAFE for no other workers, CAUTION for 1-2, DANGER for 3 or more
    """
    other_count = len({name for name in used_by if name != target_worker})

    if other_count == 0:
        return RiskLevel.SAFE
    if other_count <= CAUTION_MAX_OTHER_WORKERS:
        return RiskLevel.CAUTION
    return RiskLevel.DANGER
