"""Library configuration using Pydantic Settings.

Configuration is environment-aware:
- PANTRY_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
PANTRY_ENV = os.getenv("PANTRY_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

DEFAULT_BASE_URL = "https://getpantry.cloud/apiv1/pantry"

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(PANTRY_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (deployments might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_pantry_settings() -> "PantrySettings":
    """Build Pantry service settings from environment."""

    return PantrySettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class PantrySettings(BaseSettings):
    """Pantry service and dispatch configuration.

    The API key is optional here because clients usually receive it at
    construction time; the factory validates its presence when it has to
    fall back to the environment.
    """

    api_key: str | None = Field(
        None,
        description="Pantry API key (the pantry identifier embedded in every path)",
    )
    base_url: str = Field(
        DEFAULT_BASE_URL,
        description="Base URL of the Pantry API, without the trailing key segment",
    )
    rate_limited: bool = Field(
        True,
        description="Route every request through the shared token-bucket limiter",
    )
    rate_limit_per_second: float = Field(
        1.0,
        description="Steady-state permits refilled per second",
        gt=0,
    )
    rate_limit_burst: int = Field(
        2,
        description="Maximum permits available back-to-back before throttling",
        ge=1,
    )
    timeout_seconds: float = Field(
        30.0,
        description="HTTP request timeout in seconds",
        gt=0,
    )
    strict_decoding: bool = Field(
        False,
        description="Raise DecodeAppError instead of falling back to default values",
    )

    model_config = SettingsConfigDict(
        env_prefix="PANTRY_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field(
        "INFO",
        description="Root log level name (DEBUG, INFO, WARNING, ...)",
    )
    format: str = Field(
        "json",
        description="Formatter to use: 'json' or 'plain'",
    )
    output: str = Field(
        "stdout",
        description="Destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        3,
        description="Number of rotated log files to keep",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{PANTRY_ENV} file.
    """

    pantry_env: str = PANTRY_ENV
    pantry: PantrySettings = Field(default_factory=_build_pantry_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
