"""
Config Manager Tests
====================
Unit tests for the ApplicationSettings configuration management system.
"""

import pytest
from pydantic import ValidationError

from token_auth.core.config_manager import ApplicationSettings


class TestApplicationSettingsDefaults:
    """Test default configuration values."""

    def test_default_settings(self, monkeypatch):
        """Test that all default values are set correctly."""
        for name in ("DEBUG", "LOG_LEVEL", "TOKEN_KEY_DIRECTORY", "AUTH_SKIP_PATHS"):
            monkeypatch.delenv(name, raising=False)

        settings = ApplicationSettings(_env_file=None)

        # Application metadata
        assert settings.app_name == "Token Auth Service"
        assert settings.app_version == "1.0.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"

        # FastAPI server configuration
        assert settings.fastapi_host == "0.0.0.0"
        assert settings.fastapi_port == 8000

        # Token configuration
        assert settings.token_lifetime_minutes == 15
        assert settings.token_key_directory == "keys"
        assert settings.token_issuer == "token_auth_api"
        assert settings.token_audience == "token_auth"

        # Request authentication
        assert settings.auth_cookie_name == "access_token"
        assert settings.auth_skip_paths == []


class TestApplicationSettingsValidators:
    """Test field validators."""

    @pytest.mark.parametrize(
        "valid_level",
        ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "debug", "warning"],
    )
    def test_validate_log_level_valid(self, valid_level):
        """Test that valid log levels pass validation and return uppercase."""
        settings = ApplicationSettings(log_level=valid_level)

        assert settings.log_level == valid_level.upper()

    def test_validate_log_level_invalid(self):
        """Test that invalid log level raises ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            ApplicationSettings(log_level="INVALID")

        assert "Log level must be one of" in str(exc_info.value)

    @pytest.mark.parametrize("invalid_lifetime", [0, -5])
    def test_validate_token_lifetime_invalid(self, invalid_lifetime):
        """Test that non-positive token lifetimes are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ApplicationSettings(token_lifetime_minutes=invalid_lifetime)

        assert "Token lifetime must be greater than 0 minutes" in str(exc_info.value)


class TestApplicationSettingsFromEnvironment:
    """Test environment variable loading."""

    def test_load_from_environment_variables(self, monkeypatch):
        """Test loading configuration from environment variables."""
        monkeypatch.setenv("APP_NAME", "Test App")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("TOKEN_LIFETIME_MINUTES", "5")
        monkeypatch.setenv("TOKEN_KEY_DIRECTORY", "/etc/token-keys")
        monkeypatch.setenv("TOKEN_ISSUER", "issuer-from-env")
        monkeypatch.setenv("AUTH_SKIP_PATHS", '["/api/v1/health", "/api/docs"]')

        settings = ApplicationSettings()

        assert settings.app_name == "Test App"
        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.token_lifetime_minutes == 5
        assert settings.token_key_directory == "/etc/token-keys"
        assert settings.token_issuer == "issuer-from-env"
        assert settings.auth_skip_paths == ["/api/v1/health", "/api/docs"]

    def test_environment_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("token_audience", "lowercase-env")

        settings = ApplicationSettings()

        assert settings.token_audience == "lowercase-env"
