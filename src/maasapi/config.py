"""
SDK settings.

Values come from keyword arguments, then ``MAAS_*`` environment variables,
then the defaults below.

Usage:
    >>> from maasapi.config import get_settings, configure_settings
    >>> get_settings().retry_attempts
    4
    >>> configure_settings(retry_attempts=2, log_level="DEBUG")
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SDKSettings(BaseSettings):
    """Client configuration loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="MAAS_",
        extra="ignore",
    )

    # Connection
    connect_timeout: float = Field(default=10.0, ge=1.0, le=120.0)
    request_timeout: float = Field(default=30.0, ge=1.0, le=300.0)

    # Retry on 503 Service Unavailable
    retry_attempts: int = Field(default=4, ge=0, le=20)
    retry_after_max: float = Field(default=10.0, ge=0.0, le=120.0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False


_settings: SDKSettings | None = None


def get_settings() -> SDKSettings:
    """Return the process settings, creating them on first use."""
    global _settings
    if _settings is None:
        _settings = SDKSettings()
    return _settings


def configure_settings(**overrides: Any) -> SDKSettings:
    """Replace the process settings with a new instance built from overrides."""
    global _settings
    _settings = SDKSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the env."""
    global _settings
    _settings = None


__all__ = ["SDKSettings", "get_settings", "configure_settings", "reset_settings"]
