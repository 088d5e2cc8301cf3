"""Application configuration."""

import os
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    internal_secret: str | None = None
    openai_api_key: str
    openai_moderation_model: str = "omni-moderation-latest"
    openai_vision_model: str = "gpt-4o"
    classifier_timeout_seconds: float = 30.0
    photos_bucket: str = "photos"
    job_batch_limit: int = 10
    job_max_attempts: int = 5
    log_level: LogLevel = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


def parse_job_limit(raw: str | None, default: int) -> int:
    """Parse a job batch limit from a query value, clamped to 1..50."""
    if raw is None:
        return default
    cleaned = raw.strip()
    if not cleaned.isdigit():
        return default
    return max(1, min(50, int(cleaned)))
