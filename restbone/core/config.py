"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.

Environment variables use the ``RESTBONE_`` prefix and double underscore (__)
as delimiter for nested groups. For example ``RESTBONE_REST__MAX_LIMIT=50``
maps to ``settings.rest.max_limit``.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class RestConfig(BaseModel):
    """REST route binding configuration."""

    path: str = Field(default="/", description="URL prefix the resource routes are mounted under")
    default_limit: int = Field(default=20, ge=1, description="Page size used when the request gives no limit")
    max_limit: int = Field(default=100, ge=1, description="Upper bound for the requested page size")

    model_config = ConfigDict(strict=False)

    @property
    def prefix(self) -> str:
        """The mount path normalized to end with exactly one slash."""
        return self.path.rstrip("/") + "/"


class BackboneConfig(BaseModel):
    """Backbone.js client model generation configuration."""

    namespace: str = Field(default="", description="Prefix prepended to every generated class name")
    script_url: str = Field(default="/js/models.js", description="URL the generated script is served from")
    output_file: Optional[str] = Field(default=None, description="File the generated script is written to on startup")

    model_config = ConfigDict(strict=False)


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(default=True, description="Allow credentials in CORS requests")
    allow_methods: list[str] = Field(default=["*"], description="Allowed HTTP methods (use * for all)")
    allow_headers: list[str] = Field(default=["*"], description="Allowed HTTP headers (use * for all)")

    model_config = ConfigDict(strict=False)


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_prefix="RESTBONE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    project_name: str = Field(default="restbone", description="Title of the generated API")
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(default="detailed", description="Log format (simple, detailed, json)")
    log_file_dir: str = Field(default="logs", description="Directory for the log file")
    enable_file_logging: bool = Field(default=False, description="Also write logs to a file")

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./restbone.db",
        description="Async SQLAlchemy connection URL for the application database",
    )

    # =====================================================================
    # Views
    # =====================================================================
    templates_dir: Optional[str] = Field(
        default=None,
        description="Jinja2 template directory for HTML views; JSON only when unset",
    )

    # =====================================================================
    # Grouped Configurations
    # =====================================================================
    rest: RestConfig = Field(default_factory=RestConfig, description="REST route configuration")
    backbone: BackboneConfig = Field(default_factory=BackboneConfig, description="Client model configuration")
    cors: CORSConfig = Field(default_factory=CORSConfig, description="CORS configuration")


settings = Settings()
