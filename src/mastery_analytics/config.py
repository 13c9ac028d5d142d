"""Configuration management for the Mastery Analytics engine."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Mastery Analytics"
    app_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./mastery_analytics.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = Field(default="json", pattern="^(json|console)$")

    # Analytics
    session_history_limit: int = Field(default=100, gt=0)
    forecast_horizon: int = Field(default=5, ge=0)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
