"""Client settings using pydantic-settings.

Loads configuration from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,  # Allow both field name and alias
    )

    # Environment
    environment: Literal["development", "staging", "production", "testing"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Backend
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the assistant backend",
        validation_alias=AliasChoices("api_base_url", "seymour_api_url"),
    )
    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Bearer token sent with every request (empty = no Authorization header)",
        validation_alias=AliasChoices("api_token", "seymour_api_token"),
    )
    default_model_key: str = Field(
        default="claude-sonnet-4",
        description="Model used when none is selected explicitly",
    )

    # Endpoints
    stream_path: str = Field(default="/api/chat/message/stream")
    new_session_path: str = Field(default="/api/chat/new")
    models_path: str = Field(default="/api/chat/models")

    # Timeouts
    stream_timeout_seconds: float = Field(
        default=900.0,
        gt=0,
        description="Read timeout while waiting for the next streamed chunk",
    )
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for non-streaming calls (session creation, model list)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are loaded once and reused.
    """
    return Settings()
