"""
Configuration settings for the thinktank model processor.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "thinktank"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === OpenRouter Configuration ===
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_TIMEOUT: int = 300  # seconds, reviews of large diffs are slow

    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int | None = None  # Provider default when unset

    # === Retry & Backoff ===
    MAX_ATTEMPTS: int = Field(default=3, ge=1)
    NETWORK_RETRY_WAIT_SECONDS: float = Field(default=30.0, gt=0)
    RATE_LIMIT_RETRY_WAIT_SECONDS: float = Field(default=60.0, gt=0)
    SERVER_RETRY_WAIT_SECONDS: float = Field(default=15.0, gt=0)

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()


# Global settings instance
settings = Settings()
