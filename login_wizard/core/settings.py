"""Application settings with Pydantic validation."""

from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


def _validate_http_url(name: str, value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{name} must be an http(s) URL, got {value!r}")
    return value.rstrip("/")


class WizardSettings(BaseSettings):
    """Login wizard settings with validation and environment variable support."""

    # Homeserver connection
    homeserver_url: str = Field(..., description="Base URL of the Matrix homeserver")  # Required
    identity_server_url: Optional[str] = Field(
        default=None, description="Identity server URL carried in the connection config"
    )

    # Transport
    request_timeout: float = Field(
        default=30.0, gt=0, description="Total request timeout in seconds"
    )
    connect_timeout: float = Field(
        default=10.0, gt=0, description="Connection establishment timeout in seconds"
    )
    transport_max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts per request on network errors (1 disables transport retries)",
    )

    # Login
    default_device_name: str = Field(
        default="matrix-login-wizard",
        description="Initial device display name sent on login when none is given",
    )

    # Environment
    env: str = Field(
        default="production", description="Environment (production, development, testing)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(default=False, description="Write JSON log lines to the log file")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env
    )

    @field_validator("homeserver_url")
    @classmethod
    def validate_homeserver_url(cls, v: str) -> str:
        """Validate homeserver URL format."""
        return _validate_http_url("HOMESERVER_URL", v)

    @field_validator("identity_server_url")
    @classmethod
    def validate_identity_server_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate identity server URL format."""
        if not v:
            return None
        return _validate_http_url("IDENTITY_SERVER_URL", v)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    def is_development(self) -> bool:
        """
        Check if running in development mode.

        Returns:
            True if development environment
        """
        return self.env == "development"


def load_settings(**overrides: Any) -> WizardSettings:
    """
    Build settings from the environment with explicit overrides.

    Args:
        **overrides: Field values taking precedence over the environment

    Returns:
        WizardSettings instance

    Raises:
        ConfigurationError: If required settings are missing or invalid
    """
    try:
        return WizardSettings(**overrides)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in e.errors()
        ]
        summary = "; ".join(f"{error['field']}: {error['message']}" for error in errors)
        raise ConfigurationError(
            f"Invalid configuration: {summary}", details={"errors": errors}
        ) from e


# Singleton instance
_settings: Optional[WizardSettings] = None


def get_settings() -> WizardSettings:
    """
    Get application settings singleton.

    Returns:
        WizardSettings instance

    Raises:
        ConfigurationError: If required settings are missing or invalid
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
