"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="Token Auth Service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=8000, description="FastAPI port")

    # Token configuration
    token_lifetime_minutes: int = Field(
        default=15, description="Minutes before an issued token expires"
    )
    token_key_directory: str = Field(
        default="keys", description="Directory holding private.key and public.key"
    )
    token_issuer: str = Field(default="token_auth_api", description="Token issuer")
    token_audience: str = Field(default="token_auth", description="Token audience")

    # Request authentication
    auth_cookie_name: str = Field(
        default="access_token", description="Cookie carrying the access token"
    )
    auth_skip_paths: List[str] = Field(
        default_factory=list, description="Path prefixes that bypass authentication"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("token_lifetime_minutes")
    @classmethod
    def validate_token_lifetime(cls, v: int) -> int:
        """Validate token lifetime is positive."""
        if v <= 0:
            raise ValueError("Token lifetime must be greater than 0 minutes")
        return v


# Global settings instance
settings = ApplicationSettings()
