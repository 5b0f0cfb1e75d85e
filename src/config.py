"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating required fields and providing actionable error messages.
"""

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

from loganalytics.client import DEFAULT_HOST_SUFFIX, DEFAULT_WORKER_COUNT, build_ingestion_url
from loganalytics.models import InvalidSharedKeyError, decode_shared_key
from loganalytics.transport import DEFAULT_TIMEOUT, validate_log_name

_T = TypeVar("_T", int, float)


def _get_required_env(name: str) -> str:
    """Read a required env var or raise a helpful error."""
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required. Please set it in your .env file.")
    if value.startswith("your_") and value.endswith("_here"):
        raise ValueError(f"{name} is required. Please replace the placeholder value in your .env file.")
    return value


def _get_env_str(name: str, default: str) -> str:
    """Read an optional string env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class LogAnalyticsConfig(BaseModel):
    """Configuration for shipping logs to a Log Analytics workspace."""

    workspace_id: str = Field(..., description="Log Analytics workspace id")
    shared_key: str = Field(..., description="Workspace shared key (base64)", repr=False)
    log_name: str = Field(..., description="Custom log type (Log-Type header)")

    worker_count: int = Field(default=DEFAULT_WORKER_COUNT, ge=1, description="Number of delivery workers")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request timeout (seconds)")
    host_suffix: str = Field(default=DEFAULT_HOST_SUFFIX, description="Data Collector host suffix")

    @property
    def url(self) -> str:
        """Get the Data Collector URL for the workspace."""
        return build_ingestion_url(self.workspace_id, self.host_suffix)

    @field_validator("workspace_id")
    def validate_workspace_id(cls, v: str) -> str:
        """Validate workspace id is set (not empty/placeholder)."""
        if not v or v == "your_workspace_id_here":
            raise ValueError("LOG_ANALYTICS_WORKSPACE_ID is required. Please set it in your .env file.")
        return v

    @field_validator("shared_key")
    def validate_shared_key(cls, v: str) -> str:
        """Validate the shared key decodes as base64."""
        if not v or v == "your_shared_key_here":
            raise ValueError("LOG_ANALYTICS_SHARED_KEY is required. Please set it in your .env file.")
        try:
            decode_shared_key(v)
        except InvalidSharedKeyError as exc:
            raise ValueError(
                "LOG_ANALYTICS_SHARED_KEY must be the base64 primary or secondary key of the workspace."
            ) from exc
        return v

    @field_validator("log_name")
    def check_log_name(cls, v: str) -> str:
        """Validate the custom log name accepted by the Log-Type header."""
        return validate_log_name(v)


class LoggingConfig(BaseModel):
    """Diagnostic logging settings."""

    level: str = Field(default="INFO", description="Log level name")
    format: str = Field(default="text", description="'text' or 'json'")

    @field_validator("format")
    def validate_format(cls, v: str) -> str:
        normalized = v.lower()
        if normalized not in {"text", "json"}:
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json'. Got: {v!r}")
        return normalized


class Config(BaseModel):
    """Top-level application configuration."""

    log_analytics: LogAnalyticsConfig = Field(..., description="Log Analytics configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")


def load_config() -> Config:
    """Load application configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages when required configuration is
      missing or still contains placeholder values.
    """
    dotenv.load_dotenv()

    log_analytics = LogAnalyticsConfig(
        workspace_id=_get_required_env("LOG_ANALYTICS_WORKSPACE_ID"),
        shared_key=_get_required_env("LOG_ANALYTICS_SHARED_KEY"),
        log_name=_get_required_env("LOG_ANALYTICS_LOG_NAME"),
        worker_count=_get_env_number("LOG_ANALYTICS_WORKER_COUNT", DEFAULT_WORKER_COUNT, int),
        timeout=_get_env_number("LOG_ANALYTICS_TIMEOUT", DEFAULT_TIMEOUT, float),
        host_suffix=_get_env_str("LOG_ANALYTICS_HOST_SUFFIX", DEFAULT_HOST_SUFFIX),
    )
    logging = LoggingConfig(
        level=_get_env_str("LOG_LEVEL", "INFO"),
        format=_get_env_str("LOG_FORMAT", "text"),
    )
    return Config(log_analytics=log_analytics, logging=logging)
