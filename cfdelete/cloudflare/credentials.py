"""Cloudflare credential resolution.

Values are read from the environment by the CLI settings. Prompting and
on-disk storage are handled outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class CredentialValidationError(Exception):
    """Raised when no usable credentials are configured."""


@dataclass(frozen=True)
class Credentials:
    """API authentication info.

    Attributes:
        token: API token, or the global API key when email is set
        email: Account email, only used with a global API key
    """

    token: str
    email: Optional[str] = None

    @property
    def is_global_key(self) -> bool:
        return self.email is not None

    def headers(self) -> dict[str, str]:
        if self.is_global_key:
            return {"X-Auth-Key": self.token, "X-Auth-Email": self.email or ""}
        return {"Authorization": f"Bearer {self.token}"}


def resolve_credentials(
    api_token: Optional[str] = None,
    api_key: Optional[str] = None,
    email: Optional[str] = None,
) -> Credentials:
    """Choose the credentials to authenticate with.

    An API token takes precedence over a global API key, which additionally
    requires the account email.

    Args:
        api_token: CLOUDFLARE_API_TOKEN value
        api_key: CLOUDFLARE_API_KEY value
        email: CLOUDFLARE_EMAIL value

    Returns:
        Resolved credentials

    Raises:
        CredentialValidationError: If credentials are missing or incomplete
    """
    token = (api_token or "").strip()
    if token:
        return Credentials(token=token)

    key = (api_key or "").strip()
    if key:
        address = (email or "").strip()
        if not address:
            raise CredentialValidationError("CLOUDFLARE_API_KEY requires CLOUDFLARE_EMAIL to be set")
        return Credentials(token=key, email=address)

    raise CredentialValidationError(
        "No Cloudflare credentials found. Set CLOUDFLARE_API_TOKEN "
        "(create one at https://dash.cloudflare.com/profile/api-tokens)."
    )
