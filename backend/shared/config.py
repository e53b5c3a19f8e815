"""
Centralized configuration for the Debate Arena backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., LLM_*, REALTIME_*).
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Debate Arena API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # LLM provider ("provider/model_id", e.g. "openai/gpt-4o-mini" or "ollama/llama3")
    llm_model: str = "openai/gpt-4o-mini"
    llm_api_base: str = ""
    llm_temperature: float = 0.8

    # LLM Provider API Keys
    openai_api_key: str = ""
    xai_api_key: str = ""
    openrouter_api_key: str = ""

    # Orchestration
    phase_timeout_seconds: float = 300.0
    phase_timeouts: dict[str, float] = Field(default_factory=dict)
    cross_exam_rounds: int = Field(default=1, ge=1, le=2)
    lightning_question_count: int = Field(default=2, ge=1)
    judge_reveal_delay_seconds: float = 2.0
    strict_debate_ids: bool = False

    # Realtime observer channel
    realtime_token_secret: str = "change-me-in-production"
    realtime_token_ttl_seconds: int = 60


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
