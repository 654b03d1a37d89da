"""Configuration management using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from srampool.adapters.outbound.gen_pool import DEFAULT_GRANULARITY


class PoolSettings(BaseSettings):
    """SRAM pool configuration.

    Controls allocation granularity and where device descriptions live.
    """

    model_config = SettingsConfigDict(
        env_prefix="SRAM_POOL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    granularity: int = Field(
        default=DEFAULT_GRANULARITY,
        ge=1,
        le=4096,
        description="Allocation unit in bytes (must be power of 2)",
    )

    device_file: str = Field(
        default="devices.yaml",
        description="YAML file describing SRAM devices and their reserved blocks",
    )

    @field_validator("granularity")
    @classmethod
    def validate_granularity(cls, v: int) -> int:
        """Validate granularity is a power of 2."""
        if v & (v - 1) != 0:
            raise ValueError("granularity must be a power of 2")
        return v


class LoggingSettings(BaseSettings):
    """Log output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SRAM_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    json_output: bool = Field(
        default=False,
        description="Render log events as JSON instead of console text",
    )


class Settings(BaseSettings):
    """Root settings container.

    Example:
        >>> settings = Settings()
        >>> settings.pool.granularity
        32
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    pool: PoolSettings = Field(default_factory=PoolSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the settings instance.

    Loads configuration from environment variables and .env file.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from the environment (for testing)."""
    global _settings
    _settings = Settings()
    return _settings
