"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_nutrition.adapters.nutritionix_client import NUTRITIONIX_BASE_URL
from meal_nutrition.adapters.openfoodfacts_client import OPENFOODFACTS_BASE_URL
from meal_nutrition.services.cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    nutritionix_app_id: str = ""
    nutritionix_app_key: str = ""
    nutritionix_base_url: str = NUTRITIONIX_BASE_URL
    openfoodfacts_base_url: str = OPENFOODFACTS_BASE_URL
    lookup_retry_attempts: int = 1
    log_level: str = "INFO"
    result_cache_ttl_seconds: int = DEFAULT_TTL_SECONDS
    result_cache_max_entries: int = DEFAULT_MAX_ENTRIES
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def missing_credentials(settings: Settings) -> list[str]:
    """Return env var names of required credentials that are not configured."""
    missing: list[str] = []
    if not (settings.openai_api_key or "").strip():
        missing.append("OPENAI_API_KEY")
    return missing
