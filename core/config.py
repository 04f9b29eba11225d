"""Application configuration."""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    """
    Service configuration.

    Every field has a working default so the service starts with no
    environment at all (in-memory backend on port 3009).
    """

    # Storage
    store_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Record store implementation",
    )
    database_url: str | None = Field(
        default=None,
        description="PostgreSQL DSN. Fetched from Vault when unset and backend is postgres",
    )
    db_pool_min: int = Field(
        default=1,
        description="Minimum pooled database connections",
        ge=1,
    )
    db_pool_max: int = Field(
        default=10,
        description="Maximum pooled database connections",
        ge=1,
        le=100,
    )

    # Vault, consulted only when database_url is unset
    vault_addr: str | None = Field(
        default=None,
        description="Vault server address",
    )
    vault_namespace: str | None = Field(
        default=None,
        description="Vault Enterprise namespace",
    )
    vault_role_id: str | None = Field(
        default=None,
        description="AppRole role ID",
    )
    vault_secret_id: str | None = Field(
        default=None,
        description="AppRole secret ID",
        repr=False,
    )

    # HTTP
    host: str = Field(
        default="0.0.0.0",
        description="Interface to bind",
    )
    port: int = Field(
        default=3009,
        description="Port to listen on",
        ge=1,
        le=65535,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by CORS",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file in addition to the console",
    )

    # Application
    app_name: str = Field(
        default="Customer Service",
        description="Title shown in the OpenAPI docs",
    )


# Environment variable -> config field
_ENV_FIELDS = {
    "STORE_BACKEND": "store_backend",
    "DATABASE_URL": "database_url",
    "DB_POOL_MIN": "db_pool_min",
    "DB_POOL_MAX": "db_pool_max",
    "VAULT_ADDR": "vault_addr",
    "VAULT_NAMESPACE": "vault_namespace",
    "VAULT_ROLE_ID": "vault_role_id",
    "VAULT_SECRET_ID": "vault_secret_id",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
    "APP_NAME": "app_name",
}


def load_config(env_file: str | Path | None = ".env") -> AppConfig:
    """
    Build config from environment variables.

    A .env file, when present, is loaded first; real environment
    variables take precedence over it.

    Raises:
        pydantic.ValidationError: If a variable has an invalid value
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)

    values: dict = {}
    for env_name, field in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value:
            values[field] = value

    origins = os.getenv("CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    return AppConfig(**values)
