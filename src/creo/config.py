"""Centralized gateway configuration via environment variables."""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Gateway settings loaded from environment variables.

    All LLM API keys use SecretStr to prevent accidental logging.
    Keys starting with ``proxy_key_prefix`` are sent to ``proxy_base_url``
    instead of the vendor's own endpoint (OpenAI and Claude only).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # --- LLM API Keys ---
    gemini_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None

    # --- LLM Default Models ---
    gemini_default_model: str = "gemini-2.0-flash"
    openai_default_model: str = "gpt-4o-mini"
    anthropic_default_model: str = "claude-3-5-sonnet-20241022"

    # --- Endpoints ---
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_version: str = "2023-06-01"
    proxy_base_url: str = "https://api.emergent.ai/v1"
    proxy_key_prefix: str = "sk-emergent-"

    # --- Retry policy ---
    llm_max_retries: int = Field(default=2, ge=0)
    llm_initial_delay_ms: int = Field(default=500, ge=0)
    llm_backoff_multiplier: float = Field(default=2.0, gt=1)
    llm_max_delay_ms: int = Field(default=60_000, gt=0)
    llm_max_jitter_ms: int = Field(default=250, ge=0)

    # --- Timeouts ---
    # Per HTTP attempt; a timed-out attempt counts as a network failure.
    llm_request_timeout_s: float = Field(default=60.0, gt=0)
    # Whole call (attempts + backoff). None means no deadline.
    llm_call_deadline_s: float | None = Field(default=None, gt=0)

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from creo.config import get_settings
        settings = get_settings()
    """
    return Settings()
