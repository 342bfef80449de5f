"""
Configuration management for FleetDeck.
Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LiveChannelSettings(BaseSettings):
    """Live push channel configuration."""

    url: str = "ws://localhost:5000/ws"
    reconnect_interval: float = Field(default=3.0, ge=0.0)
    max_reconnect_attempts: int = Field(default=5, ge=0)

    model_config = SettingsConfigDict(env_prefix="LIVE_")


class APISettings(BaseSettings):
    """Dashboard REST API configuration."""

    base_url: str = "http://localhost:5000"
    timeout: float = Field(default=10.0, gt=0.0)

    model_config = SettingsConfigDict(env_prefix="API_")


class CacheSettings(BaseSettings):
    """Query cache configuration."""

    ttl_seconds: float = Field(default=30.0, gt=0.0)

    model_config = SettingsConfigDict(env_prefix="CACHE_")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: str = "INFO"
    file_path: Optional[str] = None

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    app_name: str = "FleetDeck"
    app_version: str = "1.0.0"
    environment: str = "development"

    # Sub-configurations
    live: LiveChannelSettings = Field(default_factory=LiveChannelSettings)
    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        valid_envs = ["development", "test", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v.lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
