"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_redis_settings() -> "RedisSettings":
    """Build Redis settings from environment."""

    return RedisSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> "RateLimitSettings":
    """Build rate limit settings from environment."""

    return RateLimitSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()  # type: ignore[call-arg]


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items.

    Examples:
        >>> parse_csv("/health, /metrics ,")
        ['/health', '/metrics']
        >>> parse_csv(None)
        []
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class RedisSettings(BaseSettings):
    """Connection settings for the Redis counter store."""

    url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL (use rediss:// for TLS)",
    )
    socket_timeout_seconds: float = Field(
        2.0,
        description="Socket timeout applied to every counter round trip",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Admission engine configuration.

    The IP rule is always configured when rate limiting is enabled. The header
    rule is only added when ``header_capacity`` is set.
    """

    enabled: bool = Field(
        True,
        description="Install the rate limit middleware",
    )
    backend: str = Field(
        "redis",
        description="Counter store backend: redis or memory",
    )
    key_prefix: str = Field(
        "",
        description="Namespace for every counter written by this deployment",
    )
    remaining_header_enabled: bool = Field(
        False,
        description="Expose X-RateLimit-<NAME>-Remaining headers",
    )
    concurrent_evaluation: bool = Field(
        False,
        description="Issue the per-rule counter round trips concurrently",
    )

    ip_capacity: int = Field(
        100,
        description="Requests admitted per client address per window",
        ge=1,
    )
    ip_window_seconds: int = Field(
        3600,
        description="Window size for the client address rule",
        ge=1,
    )
    forwarded_header: str | None = Field(
        None,
        description="Header carrying the client address behind a proxy (e.g. X-Forwarded-For)",
    )

    header_name: str = Field(
        "X-API-Key",
        description="Request header used as key for the header rule",
    )
    header_rule_name: str = Field(
        "ID",
        description="Rule name used in X-RateLimit-<NAME>-* headers for the header rule",
    )
    header_capacity: int | None = Field(
        None,
        description="Requests admitted per header value per window (unset disables the rule)",
        ge=1,
    )
    header_window_seconds: int = Field(
        3600,
        description="Window size for the header rule",
        ge=1,
    )

    exempt_paths: str | None = Field(
        "/health",
        description="Comma-separated paths never counted by any rule",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(0, description="Rotate log file at this size (0 disables rotation)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    redis: RedisSettings = Field(default_factory=_build_redis_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance, nested groups built via default_factory so env loading works
settings = Settings()
