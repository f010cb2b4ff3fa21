"""Configuration for the Rephrase AI service.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The only required value is the Gemini API key (`GEMINI_API_KEY`); the process
refuses to start without it.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RephraseSettings(BaseSettings):
    """Settings for the API server and the Gemini client.

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `RephraseSettings(_env_file=path_to_env)`.
    """

    # The default is empty so `RephraseSettings()` type-checks; validation below
    # enforces that a key is actually provided.
    gemini_api_key: str = Field(
        default="",
        validation_alias="GEMINI_API_KEY",
        description="API key used to authenticate against the Gemini API",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash-latest",
        validation_alias="GEMINI_MODEL",
        description="Gemini model name used for every generation call",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias="GEMINI_BASE_URL",
    )

    request_timeout_seconds: float = Field(
        default=90.0,
        validation_alias="GEMINI_TIMEOUT_SECONDS",
        description="Overall timeout applied to a single call attempt.",
        gt=0,
    )
    max_attempts: int = Field(
        default=4,
        validation_alias="GEMINI_MAX_ATTEMPTS",
        description="Maximum number of attempts for a single generation call.",
        ge=1,
        le=10,
    )
    initial_backoff_seconds: float = Field(
        default=1.0,
        validation_alias="GEMINI_INITIAL_BACKOFF_SECONDS",
        description="Sleep before the first retry; doubled before each subsequent retry.",
        ge=0,
    )

    word_limit: int = Field(
        default=200,
        validation_alias="REPHRASE_WORD_LIMIT",
        description="Maximum whitespace-delimited words accepted for non-research actions.",
        gt=0,
    )
    stats_interval_seconds: float = Field(
        default=2.0,
        validation_alias="REPHRASE_STATS_INTERVAL_SECONDS",
        description="Interval (seconds) between usage-counter broadcasts.",
        gt=0,
    )

    host: str = Field(default="0.0.0.0", validation_alias="REPHRASE_HOST")
    port: int = Field(default=8080, validation_alias="PORT", gt=0, le=65535)

    # Static browser client served at `/` when the directory exists.
    web_root: Path = Field(default=Path("web"), validation_alias="REPHRASE_WEB_ROOT")

    cors_origins: str = Field(
        default="*",
        validation_alias="REPHRASE_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _require_api_key(self) -> RephraseSettings:
        if not self.gemini_api_key.strip():
            raise ValueError("GEMINI_API_KEY is required")
        return self

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
