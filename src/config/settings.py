"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file).
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every outbound call has a bounded timeout; stream generation has its own, longer bound.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    telegram_bot_token: str = Field(alias="TELEGRAM_BOT_TOKEN")
    catalog_api_base: str = Field(alias="CATALOG_API_BASE")
    stream_api_base: str = Field(alias="STREAM_API_BASE")

    http_timeout_s: float = Field(default=30.0, gt=0, alias="HTTP_TIMEOUT_S")
    stream_timeout_s: float = Field(default=40.0, gt=0, alias="STREAM_TIMEOUT_S")

    llm_enabled: bool = Field(default=False, alias="LLM_ENABLED")
    llm_api_key: str | None = Field(default=None, alias="LLM_API_KEY")
    llm_model: str = Field(default="gpt-4o-mini", alias="LLM_MODEL")
    llm_api_base: str = Field(default="https://api.openai.com/v1", alias="LLM_API_BASE")
    llm_timeout_s: float = Field(default=30.0, gt=0, alias="LLM_TIMEOUT_S")

    subtitle_chunk_lines: int = Field(default=100, gt=0, alias="SUBTITLE_CHUNK_LINES")
    translate_max_concurrency: int | None = Field(
        default=None, gt=0, alias="TRANSLATE_MAX_CONCURRENCY"
    )

    latest_refresh_s: float = Field(default=3 * 60 * 60, gt=0, alias="LATEST_REFRESH_S")
    latest_limit: int = Field(default=5, gt=0, alias="LATEST_LIMIT")

    usage_log_enabled: bool = Field(default=True, alias="USAGE_LOG_ENABLED")

    @field_validator("catalog_api_base", "stream_api_base", "llm_api_base")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize base URLs so endpoint paths can be appended with a single `/`."""

        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("API base must be an http(s) URL")
        return value

    @model_validator(mode="after")
    def validate_llm_config(self) -> Settings:
        """Validate the optional LLM configuration.

        If the model-backed steps are enabled, an API key must be provided.
        """

        if self.llm_enabled and not self.llm_api_key:
            raise ValueError("LLM_API_KEY is required when LLM_ENABLED=true")
        return self


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
