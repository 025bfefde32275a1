"""Configuration management for the Company News Aggregator."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream news provider (required per request, but optional for startup)
    news_api_key: Optional[str] = None
    news_api_base_url: str = "https://newsdata.io/api/1"
    news_language: str = "en"

    # Pagination
    default_pages_per_company: int = Field(default=2, ge=1)
    max_pages_per_company: int = Field(default=5, ge=1)

    # Timeouts
    request_timeout: int = 30

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Application Settings
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names, case-insensitively."""
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def has_api_key(self) -> bool:
        """Check if the upstream API key is configured."""
        return bool(self.news_api_key)


def get_settings() -> Settings:
    """Get application settings.

    Not cached: the API key is read from the environment at request time.
    """
    return Settings()
