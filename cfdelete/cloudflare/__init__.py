"""Cloudflare API access: client, credentials and error types."""

from __future__ import annotations

from cfdelete.cloudflare.client import CloudflareClient
from cfdelete.cloudflare.credentials import Credentials, resolve_credentials

__all__ = [
    "CloudflareClient",
    "Credentials",
    "resolve_credentials",
]
