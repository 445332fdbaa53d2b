"""Server settings for favicons-proxy using Pydantic Settings.

These settings cover only how the process is hosted (bind address, logging,
metrics exporter). Provider order, URL templates and the fallback policy are
fixed in :mod:`favicons_proxy.domain.model` and are not configurable.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8787, ge=1, le=65535, description="Bind port")
    uvicorn_limit_concurrency: int = Field(default=100, ge=1, description="Uvicorn concurrency limit")
    debug: bool = Field(default=False, description="Return Starlette debug tracebacks to clients")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")
    access_log: bool = Field(default=False, description="Keep uvicorn access logs at INFO")

    # Metrics
    metrics_port: int = Field(
        default=0,
        ge=0,
        le=65535,
        description="Port for the Prometheus exporter (0 disables it)",
    )
