# ABOUTME: Configuration settings for the turn resolution engine using Pydantic Settings.
# ABOUTME: Loads environment variables and provides type-safe configuration access.

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    # OpenAI API Configuration
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key for narration, validation and loot generation"
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Chat completion model used by every AI stage"
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Optional OpenAI-compatible endpoint"
    )
    llm_timeout: float = Field(
        default=25.0,
        gt=0,
        description="Timeout in seconds for a single completion call"
    )

    # Per-stage completion budgets
    scene_max_tokens: int = Field(
        default=2000,
        description="Max completion tokens for scene narration"
    )
    validation_max_tokens: int = Field(
        default=1500,
        description="Max completion tokens for action validation"
    )
    outcome_max_tokens: int = Field(
        default=800,
        description="Max completion tokens for outcome narration"
    )
    loot_max_tokens: int = Field(
        default=1200,
        description="Max completion tokens for loot generation"
    )
    scene_generation_attempts: int = Field(
        default=2,
        ge=1,
        description="Scene generation attempts before falling back to the default scene"
    )

    # Redis Configuration
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL"
    )
    store_key_prefix: str = Field(
        default="adventure",
        description="Prefix for every key written to the store"
    )

    # Persistence queue
    persistence_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Write attempts before a queued write is dropped"
    )
    persistence_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Initial backoff between queued write attempts"
    )

    # Round Settings
    action_log_limit: int = Field(
        default=50,
        description="Maximum action log lines kept per round"
    )
    scene_log_snapshot: int = Field(
        default=10,
        description="Action log lines stored with each scene cache row"
    )

    # Application Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for rotating log files; console only when unset"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Singleton settings instance - lazy initialization to allow import without .env
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
