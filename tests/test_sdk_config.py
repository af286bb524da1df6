"""
Tests for SDK configuration module (pydantic-settings).
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from maasapi.config import (
    SDKSettings,
    configure_settings,
    get_settings,
    reset_settings,
)


class TestSDKSettings:
    """Tests for SDKSettings pydantic-settings model."""

    def test_default_values(self):
        """Test default configuration values."""
        settings = SDKSettings()

        assert settings.connect_timeout == 10.0
        assert settings.request_timeout == 30.0
        assert settings.retry_attempts == 4
        assert settings.retry_after_max == 10.0
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    def test_environment_variable_override(self):
        """Test that environment variables override defaults."""
        with patch.dict(os.environ, {
            "MAAS_CONNECT_TIMEOUT": "15.0",
            "MAAS_RETRY_ATTEMPTS": "3",
            "MAAS_LOG_JSON": "true",
            "MAAS_LOG_LEVEL": "DEBUG",
        }):
            settings = SDKSettings()

            assert settings.connect_timeout == 15.0
            assert settings.retry_attempts == 3
            assert settings.log_json is True
            assert settings.log_level == "DEBUG"

    def test_validation_connect_timeout(self):
        """Test connect_timeout bounds."""
        with pytest.raises(ValidationError):
            SDKSettings(connect_timeout=0.5)
        with pytest.raises(ValidationError):
            SDKSettings(connect_timeout=150.0)

    def test_validation_retry_attempts(self):
        """Test retry_attempts bounds."""
        with pytest.raises(ValidationError):
            SDKSettings(retry_attempts=-1)
        with pytest.raises(ValidationError):
            SDKSettings(retry_attempts=25)

    def test_validation_log_level(self):
        with pytest.raises(ValidationError):
            SDKSettings(log_level="LOUD")

    def test_extra_fields_ignored(self):
        """Test that extra fields are ignored (extra='ignore')."""
        settings = SDKSettings(unknown_field="value")  # type: ignore
        assert settings.connect_timeout == 10.0

    def test_env_prefix_is_maas(self):
        """Test that environment variable prefix is MAAS_."""
        assert SDKSettings.model_config.get("env_prefix") == "MAAS_"

    def test_boundary_values_accepted(self):
        """Test boundary values are accepted."""
        settings = SDKSettings(
            connect_timeout=1.0,
            request_timeout=300.0,
            retry_attempts=0,
            retry_after_max=120.0,
        )
        assert settings.retry_attempts == 0
        assert settings.request_timeout == 300.0


class TestSettingsSingleton:
    """Tests for settings singleton pattern."""

    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_reset_settings_clears_singleton(self):
        settings1 = get_settings()
        reset_settings()
        assert get_settings() is not settings1

    def test_configure_settings_creates_new_instance(self):
        original = get_settings()

        configured = configure_settings(retry_attempts=10, log_json=True)

        assert configured.retry_attempts == 10
        assert get_settings() is configured
        assert get_settings() is not original
