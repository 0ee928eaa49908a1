"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the browser front end."""

    origins: list[str] = Field(default=["http://localhost:5173"])
    allow_credentials: bool = False
    allow_methods: list[str] = Field(default=["*"])
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Level for the service's own records")
    format: Literal["json", "plain"] = Field(
        default="plain", description="Format of the file sink"
    )
    file: str | None = Field(default=None, description="Log file path")
    rotation: str = Field(default="10 MB", description="Size at which the file rotates")
    retention: int = Field(default=5, description="Rotated files to keep")
    access_log: bool = Field(
        default=False,
        description="Keep uvicorn access records next to the request log lines",
    )
    library_levels: dict[str, str] = Field(
        default={
            "sqlalchemy.engine": "WARNING",
            "sqlalchemy.pool": "WARNING",
            "uvicorn": "INFO",
        },
        description="Minimum level per third-party stdlib logger",
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./products.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    create_tables: bool = Field(
        default=True, description="Create missing tables on application startup"
    )
    echo: bool = Field(default=False, description="Echo SQL statements")

    @computed_field
    @property
    def backend(self) -> str:
        """Name of the database backend, e.g. ``sqlite`` or ``postgresql``."""
        from sqlalchemy.engine import make_url

        return make_url(self.url).get_backend_name()

    @computed_field
    @property
    def connection_string(self) -> str:
        """Connection string handed to SQLAlchemy's ``create_engine``."""
        from sqlalchemy.engine import make_url

        return make_url(self.url).render_as_string(hide_password=False)


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    https_redirect: bool = Field(
        default=False, description="Redirect plain HTTP requests to HTTPS"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def docs_enabled(self) -> bool:
        """Interactive API docs are served everywhere except production."""
        return self.environment != "production"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
