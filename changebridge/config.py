"""Configuration loading for the changebridge adapter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from changebridge.core.models import AdapterProperties


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Adapter instance
    adapter_id: str = Field(
        default="servicenow",
        description="Adapter instance id used in events and log messages",
    )

    # ServiceNow connection
    servicenow_url: str = Field(
        default="https://dev00000.service-now.com",
        description="ServiceNow instance URL",
    )
    servicenow_username: str = Field(
        default="admin",
        description="ServiceNow login username",
    )
    servicenow_password: str = Field(
        default="",
        description="ServiceNow login password",
    )
    servicenow_table: str = Field(
        default="change_request",
        description="ServiceNow table holding change requests",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["healthcheck", "get", "post"] = Field(
        default="healthcheck",
        description="Run mode",
    )
    record_selector: str = Field(
        default="",
        description="Records to read in get mode: empty for all, a count, or a ticket number",
    )

    @field_validator("servicenow_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure the instance URL is http(s)."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("servicenow_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    def adapter_properties(self) -> AdapterProperties:
        return AdapterProperties(
            url=self.servicenow_url,
            username=self.servicenow_username,
            password=self.servicenow_password,
            service_now_table=self.servicenow_table,
        )


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
