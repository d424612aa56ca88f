"""CLI configuration.

Values come from defaults, then an optional YAML file, then environment
variables; command-line options are applied on top by the caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, YamlConfigSettingsSource

from cfdelete.cloudflare.client import DEFAULT_API_BASE
from cfdelete.cloudflare.credentials import Credentials, resolve_credentials

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "cf-delete-worker"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _reveal(secret: Optional[SecretStr]) -> Optional[str]:
    return secret.get_secret_value() if secret is not None else None


class Config(BaseSettings):
    """Runtime configuration.

    Settings use ``CF_DELETE_WORKER_*`` environment variables (e.g.
    ``CF_DELETE_WORKER_MAX_WORKERS=16``); the account id and credentials use
    the standard ``CLOUDFLARE_*`` names.

    Attributes:
        account_id: Cloudflare account id (empty: resolve from the API)
        max_workers: Thread pool size for the account scan
        log_level: Default log level
        audit_enabled: Write an audit log per deletion run
        audit_dir: Audit log directory (empty: default location)
        api_base: Cloudflare API base URL
        timeout: Per-request timeout in seconds
        api_token: API token (environment only)
        api_key: Legacy global API key (environment only)
        email: Account email used with api_key (environment only)
    """

    model_config = SettingsConfigDict(
        env_prefix="CF_DELETE_WORKER_",
        extra="ignore",
        env_ignore_empty=True,
        validate_assignment=True,
    )

    account_id: str = Field(default="", validation_alias=AliasChoices("CLOUDFLARE_ACCOUNT_ID", "account_id"))
    max_workers: int = Field(default=8, ge=1)
    log_level: str = Field(default="WARNING")
    audit_enabled: bool = Field(default=True)
    audit_dir: str = Field(default="")
    api_base: str = Field(default=DEFAULT_API_BASE)
    timeout: float = Field(default=30.0, gt=0)

    api_token: Optional[SecretStr] = Field(default=None, validation_alias="CLOUDFLARE_API_TOKEN")
    api_key: Optional[SecretStr] = Field(default=None, validation_alias="CLOUDFLARE_API_KEY")
    email: Optional[str] = Field(default=None, validation_alias="CLOUDFLARE_EMAIL")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: explicit values, then environment, then the YAML file
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Load configuration.

        Args:
            path: YAML config file (default: $CF_DELETE_WORKER_CONFIG or
                ~/.config/cf-delete-worker/config.yaml); a missing file is ignored

        Returns:
            Config instance

        Raises:
            ValueError: If the config file cannot be parsed or a value is invalid
        """
        if path is None:
            path = Path(os.environ.get("CF_DELETE_WORKER_CONFIG") or CONFIG_DIR / "config.yaml")

        # Bind the file location; YamlConfigSettingsSource reads it from model_config
        bound = type(cls.__name__, (cls,), {"model_config": SettingsConfigDict(yaml_file=path)})

        try:
            config = bound()
        except (ValueError, TypeError, yaml.YAMLError) as e:
            raise ValueError(f"Invalid configuration ({path}): {e}") from e

        logger.debug(f"Loaded configuration (file: {path}, exists: {path.exists()})")
        return config

    def credentials(self) -> Credentials:
        """Resolve API credentials from the loaded settings.

        Raises:
            CredentialValidationError: If credentials are missing or incomplete
        """
        return resolve_credentials(_reveal(self.api_token), _reveal(self.api_key), self.email)
