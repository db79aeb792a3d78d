"""Configuration management."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "reelforge"
    log_level: str = "INFO"
    json_logs: bool = False
    output_dir: str = "outputs"

    # Gemini
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
    )
    script_model: str = "gemini-3-flash-preview"
    tts_model: str = "gemini-2.5-flash-preview-tts"
    planner_model: str = "gemini-3-pro-preview"
    image_model: str = "gemini-2.5-flash-image"

    # Voice synthesis
    tts_sample_rate: int = 24000
    tts_channels: int = 1
    tts_max_attempts: int = 3
    tts_retry_delay_seconds: float = 2.0

    # Visual planning
    planner_max_output_tokens: int = 8192
    max_context_frames: int = 5

    # Community image space (FLUX.1-schnell on Hugging Face)
    flux_space: str = "black-forest-labs/FLUX.1-schnell"
    flux_api_name: str = "/infer"
    flux_steps: int = 4
    flux_max_attempts: int = 3
    flux_initial_delay_seconds: float = 2.0
    flux_backoff_base: float = 1.5
    hf_token: str | None = None

    # Timeouts
    download_timeout_seconds: float = 60.0

    # Archive limits
    archive_max_files: int = 50
    archive_max_total_chars: int = 500 * 1024

    @property
    def has_gemini_key(self) -> bool:
        """Check if a Gemini API key is configured."""
        return bool(self.gemini_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
