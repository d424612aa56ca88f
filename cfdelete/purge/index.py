"""Whole-account resource dependency index.

Maps each resource identity to the workers that reference it. Binding
fetches run concurrently; merging into the index happens on the calling
thread only, in catalog order.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Iterator, Optional

from cfdelete.cloudflare.errors import CloudflareError, WorkerNotFoundError
from cfdelete.models.binding import Binding, resource_key
from cfdelete.models.resource_usage import ResourceUsage
from cfdelete.models.worker import WorkerInfo

logger = logging.getLogger(__name__)

# progress_callback(completed, total, worker_name)
ProgressCallback = Callable[[int, int, str], None]


class ScanCancelledError(Exception):
    """Raised when a whole-account scan is cancelled before completion."""


class ResourceIndex:
    """Resource key -> usage map covering every scanned worker.

    Attributes:
        usages: Usage entries keyed by resource key, in first-seen order
        skipped_workers: Workers whose bindings could not be fetched
    """

    def __init__(self) -> None:
        self.usages: dict[str, ResourceUsage] = {}
        self.skipped_workers: list[str] = []

    @classmethod
    def from_workers(cls, workers: Iterable[WorkerInfo]) -> ResourceIndex:
        """Build an index from workers whose bindings are already loaded."""
        index = cls()
        for worker in workers:
            index.add_worker(worker.name, worker.bindings)
        return index

    def add_worker(self, worker_name: str, bindings: Iterable[Binding]) -> None:
        """Record every addressable resource referenced by a worker.

        Args:
            worker_name: Referencing worker
            bindings: That worker's bindings
        """
        for binding in bindings:
            key = resource_key(binding)
            if key is None:
                continue

            usage = self.usages.get(key)
            if usage is None:
                usage = ResourceUsage(
                    resource_key=key,
                    resource_id=binding.resource_id,
                    resource_type=binding.binding_type,
                    resource_name=binding.provisional_name,
                )
                self.usages[key] = usage

            usage.add_user(worker_name)

    def get(self, key: str) -> Optional[ResourceUsage]:
        return self.usages.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.usages

    def __len__(self) -> int:
        return len(self.usages)

    def __iter__(self) -> Iterator[ResourceUsage]:
        return iter(self.usages.values())


class ResourceIndexBuilder:
    """Builds a ResourceIndex by fetching every worker's bindings.

    Attributes:
        catalog: Object providing get_worker_bindings(name) -> list[Binding]
        max_workers: Size of the fetch thread pool
    """

    def __init__(self, catalog, max_workers: int = 8) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.catalog = catalog
        self.max_workers = max_workers

    def build(
        self,
        workers: list[WorkerInfo],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResourceIndex:
        """Scan all workers and build the index.

        A worker whose bindings cannot be fetched contributes nothing and is
        listed in ``skipped_workers``; a worker that no longer exists counts as
        having no bindings.

        Args:
            workers: Every worker in the account
            progress_callback: Called on this thread after each fetch completes
            cancel_event: When set, queued fetches are cancelled

        Returns:
            Populated ResourceIndex

        Raises:
            ScanCancelledError: If cancel_event was set before all fetches ran
        """
        total = len(workers)
        fetched: dict[str, Optional[list[Binding]]] = {}
        cancelled = False

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures: dict[Future, str] = {
                pool.submit(self.catalog.get_worker_bindings, worker.name): worker.name for worker in workers
            }

            completed = 0
            for future in as_completed(futures):
                worker_name = futures[future]

                # Only fetches that never started count; running ones still complete
                if cancel_event is not None and cancel_event.is_set() and not cancelled:
                    pending = [f for f in futures if f.cancel()]
                    if pending:
                        cancelled = True
                        logger.info(f"Scan cancelled, {len(pending)} fetch(es) not started")

                if future.cancelled():
                    continue

                fetched[worker_name] = self._collect(worker_name, future)
                completed += 1
                if progress_callback is not None:
                    progress_callback(completed, total, worker_name)

        if cancelled:
            raise ScanCancelledError(f"Scan cancelled after {len(fetched)} of {total} workers")

        index = ResourceIndex()
        for worker in workers:
            bindings = fetched.get(worker.name)
            if bindings is None:
                index.skipped_workers.append(worker.name)
                continue
            index.add_worker(worker.name, bindings)

        logger.debug(
            f"Indexed {len(index)} resource(s) across {total - len(index.skipped_workers)} worker(s), "
            f"{len(index.skipped_workers)} skipped"
        )
        return index

    def _collect(self, worker_name: str, future: Future) -> Optional[list[Binding]]:
        """Return a fetch's bindings, [] for a vanished worker, None on failure."""
        try:
            return future.result()
        except WorkerNotFoundError:
            logger.debug(f"Worker {worker_name} disappeared during scan")
            return []
        except CloudflareError as e:
            logger.warning(f"Skipping worker {worker_name}: could not fetch bindings ({e})")
            return None
