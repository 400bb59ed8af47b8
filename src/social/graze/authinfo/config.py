"""
Configuration Module for the Auth Info Store

This module defines the configuration for the auth info store and the service that hosts
it, using Pydantic for settings validation.

The Settings class is loaded from environment variables with defaults suitable for
development environments. Components receive the values they need from Settings at
construction time rather than reading the environment themselves.

Key configuration areas include:
- Database connection
- Encryption key for OAuth token material
- Error reporting and metrics
"""

import base64
import logging
from typing import Literal, Optional
from cryptography.fernet import Fernet
from pydantic import (
    AliasChoices,
    Field,
    field_validator,
)
from pydantic_settings import BaseSettings


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings for the auth info store.

    Environment variables are automatically mapped to settings fields, with aliases
    provided where other services use a different name. For example, the database
    connection string can be set with either PG_DSN or DATABASE_URL.
    """

    debug: bool = False
    """
    Enable debug mode for verbose logging.
    Set with DEBUG=true environment variable.
    """

    http_port: int = Field(alias="port", default=5100)
    """
    HTTP port for the probe endpoints.
    Set with PORT environment variable.
    """

    pg_dsn: str = Field(
        "postgresql+asyncpg://postgres:password@db/authinfo",
        validation_alias=AliasChoices("pg_dsn", "database_url"),
    )
    """
    SQLAlchemy async connection string for database access.
    Set with PG_DSN or DATABASE_URL environment variables.
    Default: postgresql+asyncpg://postgres:password@db/authinfo
    """

    encryption_key: bytes = Fernet.generate_key()
    """
    Fernet key used to encrypt OAuth token material at rest.
    Set with ENCRYPTION_KEY environment variable to the base64 encoding of a Fernet key,
    as printed by `authinfo-util gen-crypto`.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: Literal["telegraf", "none"] = "none"
    """
    Metrics backend, 'telegraf' for StatsD or 'none' to disable metrics.
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    """
    StatsD/Telegraf host for metrics collection.
    Set with TELEGRAF_HOST environment variable.
    """

    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    """
    StatsD/Telegraf port for metrics collection.
    Set with TELEGRAF_PORT environment variable.
    """

    statsd_prefix: str = "authinfo"
    """
    Prefix for all StatsD metrics from this service.
    Set with STATSD_PREFIX environment variable.
    """

    @field_validator("encryption_key", mode="before")
    @classmethod
    def decode_encryption_key(cls, v) -> bytes:
        """
        Validate and process the encryption_key setting.

        This validator accepts either:
        - Raw Fernet key bytes (for programmatic configuration)
        - A base64-encoded string containing a Fernet key

        Raises:
            ValueError: If the input is not a usable Fernet key
        """
        if isinstance(v, bytes):
            key_data = v
        elif isinstance(v, str):
            key_data = base64.b64decode(v)
        else:
            raise ValueError(
                "encryption_key must be Fernet key bytes or a base64-encoded key string"
            )

        # Fernet raises ValueError for malformed keys.
        Fernet(key_data)
        return key_data
