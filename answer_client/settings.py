"""Client settings using pydantic-settings.

Loads configuration from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Answer client configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,  # Allow both field name and alias
    )

    # Logging
    debug: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Answer endpoint
    answer_base_url: str = Field(
        default="https://answer.api.orama.com",
        description="Base URL of the answer-generation service",
    )
    answer_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Opaque API key sent as the api-key query parameter",
        validation_alias=AliasChoices("answer_api_key", "orama_api_key"),
    )
    search_endpoint: str = Field(
        default="",
        description="Backing search endpoint URL forwarded to the answer service",
        validation_alias=AliasChoices("search_endpoint", "orama_endpoint"),
    )
    inference_type: Literal["documentation"] = Field(
        default="documentation",
        description="Inference mode sent as the 'type' form field",
    )

    # Transport
    request_timeout: float = Field(
        default=300.0,
        ge=1.0,
        description="Read timeout for a streamed answer (seconds)",
    )
    connect_timeout: float = Field(
        default=10.0,
        ge=0.5,
        description="Connection establishment timeout (seconds)",
    )

    # Session behaviour
    concurrency_policy: Literal["cancel_previous", "allow_concurrent"] = Field(
        default="cancel_previous",
        description=(
            "What happens when ask() is called while an answer is still streaming: "
            "'cancel_previous' aborts the outstanding answer, "
            "'allow_concurrent' lets both stream with independent cancel tokens"
        ),
    )
    user_id: str | None = Field(
        default=None,
        description="Pre-resolved user identity (generated per session when empty)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are loaded once and reused.
    """
    return Settings()
