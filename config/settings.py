"""
Configuration settings for the venue compliance checklist engine.
All deployment-specific values are loaded from environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Venue Compliance Engine"
    debug: bool = Field(default=False)
    environment: str = Field(default="production")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database (PostgreSQL in production, SQLite for local runs and tests)
    database_url: str = Field(default="")
    database_echo: bool = Field(default=False)
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(default=30)
    db_pool_recycle: int = Field(default=1800)

    # Venue calendar
    timezone: str = Field(default="Australia/Sydney")

    # Auto-tick polling
    auto_tick_poll_seconds: int = Field(default=60)
    auto_tick_system_actor: str = Field(default="system:auto-tick")

    # Activity signal service (host application's activity logs)
    activity_signal_url: Optional[str] = Field(default=None)
    activity_signal_timeout: float = Field(default=5.0)
    activity_signal_retries: int = Field(default=2)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the application settings."""
    return settings
