"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_models: str = "gemini-2.5-flash-lite,gemini-2.5-flash"
    openai_api_key: str | None = None
    openai_models: str = "gpt-4o-mini,gpt-4o"
    primary_provider: str = "gemini"
    provider_timeout_seconds: float = 60
    moderation_timeout_seconds: float = 30
    object_fetch_timeout_seconds: float = 20
    fact_cache_table: str = "food_facts"
    fact_cache_ttl_seconds: float = 3600
    blocklist_table: str = "content_blocklist"
    blocklist_ttl_seconds: float = 600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_model_list(raw: str | None) -> list[str]:
    """Parse a comma-separated model list, keeping order and dropping blanks."""
    if raw is None:
        return []
    models: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip()
        if value and value not in models:
            models.append(value)
    return models
