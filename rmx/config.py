"""Configuration management for rmx."""

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from rmx.core.constants import API_BASE_URL, APIConstants, CacheConstants
from rmx.exceptions import ConfigurationError


class Config(BaseSettings):
    """Application configuration."""

    api_base_url: str = Field(
        default=API_BASE_URL,
        alias="RMX_API_BASE_URL",
        description="Base URL of the character catalog API",
    )
    request_timeout: float = Field(
        default=float(APIConstants.REQUEST_TIMEOUT),
        gt=0,
        alias="RMX_REQUEST_TIMEOUT",
        description="Per-request timeout in seconds",
    )

    # Request cache
    stale_time_seconds: float = Field(
        default=float(CacheConstants.STALE_TIME_SECONDS),
        ge=0,
        alias="RMX_STALE_TIME_SECONDS",
        description="Seconds after which a fresh cache entry is re-fetched on next access",
    )
    retry_attempts: int = Field(
        default=int(CacheConstants.RETRY_ATTEMPTS),
        ge=0,
        alias="RMX_RETRY_ATTEMPTS",
        description="Additional attempts for transient failures",
    )
    backoff_max_value: float = Field(
        default=float(APIConstants.BACKOFF_MAX_VALUE),
        gt=0,
        alias="RMX_BACKOFF_MAX_VALUE",
        description="Upper bound in seconds for a single backoff wait",
    )

    log_level: str = Field(
        default="WARNING",
        alias="RMX_LOG_LEVEL",
        description="Logging level for the CLI",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


def load_config() -> Config:
    """Load configuration from environment and .env file."""
    try:
        return Config()
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
