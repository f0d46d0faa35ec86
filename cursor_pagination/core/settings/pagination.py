"""Pagination engine settings.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_SIZE=50, PAGINATION_SECRET_KEY=change-me
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_size: Page size substituted when a request asks for less than one row.
        max_size: Hard upper bound for page sizes.
        secret_key: Secret used to encrypt continuation tokens.
        query_timeout: Optional per-query deadline in seconds.

    Example:
        settings = PaginationSettings(secret_key="s3cret", query_timeout=2.5)
    """

    default_size: int = Field(
        default=20,
        ge=1,
        le=10000,
        description="Page size used when the requested size is below 1",
    )
    max_size: int = Field(
        default=1000,
        ge=1,
        le=100000,
        description="Maximum allowed page size (hard limit)",
    )
    secret_key: SecretStr | None = Field(
        default=None,
        description="Secret for continuation token encryption",
    )
    query_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-query execution deadline in seconds (None disables it)",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
