"""Environment-driven settings for modelspine.

``ModelSpineSettings`` reads the database URL and the logging knobs from
the environment (and a ``.env`` file when present).  ``DATABASE_URL`` keeps
its conventional unprefixed name; everything else lives under the
``MODELSPINE_`` prefix.

Examples:
    >>> import os
    >>> os.environ["DATABASE_URL"] = "sqlite://:memory:"
    >>> ModelSpineSettings().database_url
    'sqlite://:memory:'

Tags:
    settings, configuration, pydantic, environment, modelspine
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelSpineSettings(BaseSettings):
    """Connection and logging settings.

    Fields
    ──────
    database_url     : Backend URL (``DATABASE_URL``)
    auth_token       : Bearer token for Turso (``TURSO_AUTH_TOKEN``)
    pool_size        : Max pooled connections where the driver pools
    connect_timeout  : Seconds to wait when establishing a connection
    log_level        : Structlog log level
    json_logs        : Force JSON (True) or console (False); None = auto
    """

    model_config = SettingsConfigDict(
        env_prefix="MODELSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Connection ───────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite://:memory:",
        validation_alias=AliasChoices("DATABASE_URL", "MODELSPINE_DATABASE_URL"),
    )
    auth_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TURSO_AUTH_TOKEN", "MODELSPINE_AUTH_TOKEN"),
    )
    pool_size: int = Field(default=5, ge=1)
    connect_timeout: float = Field(default=10.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None


__all__ = ["ModelSpineSettings"]
