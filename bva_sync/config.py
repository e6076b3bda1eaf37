"""Application configuration loaded from environment variables."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    bva_api_base_url: str = "https://bva-api-1013743482040.us-central1.run.app"
    bva_request_timeout_seconds: float = 30.0
    bva_page_size: int = 100
    bva_page_delay_seconds: float = 0.5

    sync_item_delay_seconds: float = 0.1
    sync_default_query: str = "veteran"
    sync_max_decisions: int = 100

    openrouter_api_key: Optional[str] = Field(
        default=None, description="Secret key for the OpenRouter API."
    )
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model_outcome: str = "google/gemini-2.0-flash-exp:free"
    app_url: str = "http://localhost:3000"
    app_title: str = "BVA Decision Intelligence Platform"

    outcome_excerpt_chars: int = 4000
    outcome_temperature: float = 0.1
    outcome_max_tokens: int = 512

    database_url: str = "sqlite:///data/bva.db"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
