"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    vision_provider: str = "clarifai"
    clarifai_api_key: str | None = None
    clarifai_base_url: str = "https://api.clarifai.com"
    clarifai_model_id: str = "food-item-recognition"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org/api/v2"
    openfoodfacts_country: str = "france"
    ciqual_base_url: str = "https://ciqual.anses.fr/cms/api/v1"
    user_agent: str = "ScanMyCarbs/1.0"
    http_timeout_seconds: float = 5.0
    health_timeout_seconds: float = 3.0
    max_search_limit: int = 50
    default_timezone: str = "Europe/Paris"
    food_cache_backend: str = "supabase"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_vision_provider(raw: str) -> str:
    """Normalize the configured vision provider name."""
    cleaned = raw.strip().lower()
    if cleaned not in {"clarifai", "openai"}:
        raise ValueError(f"Unsupported vision provider: {raw!r}")
    return cleaned
