"""Cloudflare API client.

Thin wrapper over the v4 REST API covering the calls needed to list workers,
read their bindings, delete workers and their backing resources, and look up
resource display names.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Type

import httpx

from cfdelete.cloudflare.credentials import Credentials
from cfdelete.cloudflare.errors import (
    AccountNotFoundError,
    CloudflareError,
    NotAuthorizedError,
    NotFoundError,
    RemoteError,
    TransientNetworkError,
    WorkerNotFoundError,
)
from cfdelete.models.binding import Binding, BindingType
from cfdelete.models.worker import WorkerInfo

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.cloudflare.com/client/v4"

# API error codes meaning "the named object does not exist"
NOT_FOUND_ERROR_CODES = frozenset({10006, 10007, 10013, 7404})
AUTH_ERROR_CODES = frozenset({9103, 9106, 9109, 10000})


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class CloudflareClient:
    """Cloudflare account client.

    Attributes:
        account_id: Account all calls are scoped to (resolved lazily if empty)
    """

    def __init__(
        self,
        credentials: Credentials,
        account_id: str = "",
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize client.

        Args:
            credentials: API credentials
            account_id: Account id (optional, see get_account_id)
            api_base: API base URL
            timeout: Per-request timeout in seconds
            transport: httpx transport override (tests)
        """
        self.account_id = account_id
        headers = {"Content-Type": "application/json", **credentials.headers()}
        self._http = httpx.Client(base_url=api_base, headers=headers, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> CloudflareClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Low-level request handling
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        not_found: Type[CloudflareError] = NotFoundError,
    ) -> dict[str, Any]:
        """Perform an API call and return the decoded response envelope.

        Args:
            method: HTTP method
            path: Path relative to the API base
            params: Query parameters (optional)
            not_found: Exception class raised for "does not exist" responses

        Returns:
            Decoded JSON envelope

        Raises:
            CloudflareError: Subclass matching the failure
        """
        try:
            response = self._http.request(method, path, params=params)
        except httpx.TransportError as e:
            raise TransientNetworkError(f"{method} {path} failed: {e}") from e

        try:
            envelope = response.json()
        except ValueError:
            envelope = {}
        if not isinstance(envelope, dict):
            envelope = {}

        errors = envelope.get("errors") or []
        error_code = errors[0].get("code") if errors and isinstance(errors[0], dict) else None
        message = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
        message = message or response.reason_phrase or "unknown error"
        status = response.status_code

        if status in (401, 403) or error_code in AUTH_ERROR_CODES:
            raise NotAuthorizedError(f"{method} {path}: {message}", status, error_code)
        if status == 404 or error_code in NOT_FOUND_ERROR_CODES:
            raise not_found(f"{method} {path}: {message}", status, error_code)
        if status == 429 or status >= 500:
            raise TransientNetworkError(f"{method} {path}: {message}", status, error_code)
        if status >= 400 or not envelope.get("success", False):
            raise RemoteError(f"{method} {path}: {message}", status, error_code)

        return envelope

    def _paginate(self, path: str, not_found: Type[CloudflareError] = NotFoundError) -> list[dict[str, Any]]:
        """Collect every page of a paginated list endpoint."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            envelope = self._request("GET", path, params={"page": page, "per_page": 100}, not_found=not_found)
            items.extend(envelope.get("result") or [])
            total_pages = (envelope.get("result_info") or {}).get("total_pages") or 1
            if page >= total_pages:
                return items
            page += 1

    def _account_path(self, suffix: str) -> str:
        return f"/accounts/{self.get_account_id()}{suffix}"

    # ------------------------------------------------------------------
    # Account and worker catalog
    # ------------------------------------------------------------------

    def get_account_id(self) -> str:
        """Return the account id, resolving it when not configured.

        Returns:
            Account id

        Raises:
            AccountNotFoundError: If no account is visible
            RemoteError: If several accounts are visible
        """
        if self.account_id:
            return self.account_id

        accounts = self._paginate("/accounts")
        if not accounts:
            raise AccountNotFoundError("No accounts found for these credentials")
        if len(accounts) > 1:
            raise RemoteError("Multiple accounts found, please specify --account-id")

        self.account_id = accounts[0]["id"]
        logger.debug(f"Resolved account id {self.account_id}")
        return self.account_id

    def list_workers(self) -> list[WorkerInfo]:
        """List every worker script in the account (without bindings)."""
        envelope = self._request("GET", self._account_path("/workers/scripts"), not_found=AccountNotFoundError)
        return [
            WorkerInfo(
                name=w["id"],
                account_id=self.account_id,
                created_on=_parse_timestamp(w.get("created_on")),
                modified_on=_parse_timestamp(w.get("modified_on")),
            )
            for w in envelope.get("result") or []
        ]

    def get_worker_bindings(self, script_name: str) -> list[Binding]:
        """Fetch a worker's bindings from its settings endpoint.

        Raises:
            WorkerNotFoundError: If the script does not exist
        """
        envelope = self._request(
            "GET",
            self._account_path(f"/workers/scripts/{script_name}/settings"),
            not_found=WorkerNotFoundError,
        )
        raw_bindings = (envelope.get("result") or {}).get("bindings") or []

        bindings = []
        for raw in raw_bindings:
            binding = Binding.from_api_dict(raw) if isinstance(raw, dict) else None
            if binding is None:
                logger.debug(f"Ignoring unrecognised binding on {script_name}: {raw!r}")
                continue
            bindings.append(binding)
        return bindings

    def get_worker(self, name: str) -> WorkerInfo:
        """Return a worker with its bindings.

        A failure to read bindings leaves the worker with none, so the worker
        itself can still be deleted.

        Raises:
            WorkerNotFoundError: If no worker with this name exists
        """
        worker = next((w for w in self.list_workers() if w.name == name), None)
        if worker is None:
            raise WorkerNotFoundError(f"Worker not found: {name}")

        try:
            worker.bindings = self.get_worker_bindings(name)
        except CloudflareError as e:
            logger.warning(f"Could not read bindings for {name}: {e}")
            worker.bindings = []
        return worker

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def delete_worker(self, name: str) -> None:
        self._request("DELETE", self._account_path(f"/workers/scripts/{name}"), not_found=WorkerNotFoundError)

    def delete_kv_namespace(self, namespace_id: str) -> None:
        self._request("DELETE", self._account_path(f"/storage/kv/namespaces/{namespace_id}"))

    def delete_r2_bucket(self, bucket_name: str) -> None:
        self._request("DELETE", self._account_path(f"/r2/buckets/{bucket_name}"))

    def delete_d1_database(self, database_id: str) -> None:
        self._request("DELETE", self._account_path(f"/d1/database/{database_id}"))

    # ------------------------------------------------------------------
    # Display name lookups
    # ------------------------------------------------------------------

    def get_kv_namespace_title(self, namespace_id: str) -> str:
        envelope = self._request("GET", self._account_path(f"/storage/kv/namespaces/{namespace_id}"))
        return envelope["result"]["title"]

    def get_d1_database_name(self, database_id: str) -> str:
        envelope = self._request("GET", self._account_path(f"/d1/database/{database_id}"))
        return envelope["result"]["name"]

    def lookup_display_name(self, kind: BindingType, resource_id: str) -> Optional[str]:
        """Look up a resource's human name.

        Returns:
            The name, or None for kinds without a lookup
        """
        if kind == BindingType.KV:
            return self.get_kv_namespace_title(resource_id)
        if kind == BindingType.D1:
            return self.get_d1_database_name(resource_id)
        return None


def create_client(
    credentials: Credentials,
    account_id: str = "",
    api_base: str = DEFAULT_API_BASE,
    timeout: float = 30.0,
) -> CloudflareClient:
    """Create a Cloudflare client for the given account."""
    return CloudflareClient(credentials=credentials, account_id=account_id, api_base=api_base, timeout=timeout)
