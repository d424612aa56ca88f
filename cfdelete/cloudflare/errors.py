"""Error taxonomy for Cloudflare API calls."""

from __future__ import annotations

from typing import Optional


class CloudflareError(Exception):
    """Base class for all Cloudflare API failures.

    Attributes:
        status_code: HTTP status code, if a response was received
        error_code: First API error code from the response envelope (optional)
    """

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class NotAuthorizedError(CloudflareError):
    """Credentials are missing, invalid or lack the required permission."""


class AccountNotFoundError(CloudflareError):
    """The account does not exist or is not visible to these credentials."""


class NotFoundError(CloudflareError):
    """A named object (worker, namespace, bucket, database) does not exist."""


class WorkerNotFoundError(NotFoundError):
    """The worker script does not exist."""


class TransientNetworkError(CloudflareError):
    """Connection failure, timeout, rate limit or server-side error."""


class RemoteError(CloudflareError):
    """Any other unsuccessful API response."""
