"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import (
    DiscordSnowflake,
    PlaylistMax,
    SearchCandidates,
    TimeoutSeconds,
    VolumeFloat,
)


class AudioSettings(BaseModel):
    """Extraction and transcoding configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default_volume: VolumeFloat = 1.0
    search_candidates: SearchCandidates = 3
    ytdlp_format: str = "bestaudio/best"
    ffmpeg_executable: str = Field(
        default="ffmpeg", validation_alias=AliasChoices("ffmpeg_executable", "ffmpeg")
    )
    ytdlp_executable: str = Field(
        default="yt-dlp", validation_alias=AliasChoices("ytdlp_executable", "ytdlp")
    )
    prefer_passthrough: bool = False
    reconnect_delay_max: int = Field(default=5, ge=0, le=60)
    probe_timeout_s: TimeoutSeconds = 10.0
    locator_timeout_s: TimeoutSeconds = 30.0


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, LOG_LEVEL (top-level)
    - DISCORD_TOKEN, GUILD_ID, SYNC_ON_STARTUP (bot registration)
    - PLAYLIST_MAX, YT_COOKIE (resolution and extraction)
    - AUDIO__DEFAULT_VOLUME, AUDIO__FFMPEG_EXECUTABLE, etc. (nested with delimiter)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"

    discord_token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("discord_token", "token")
    )
    guild_id: DiscordSnowflake | None = None
    sync_on_startup: bool = True

    playlist_max: PlaylistMax = 100
    yt_cookie: SecretStr | None = None

    audio: AudioSettings = Field(default_factory=AudioSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper

    @field_validator("guild_id", "yt_cookie", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Treat an empty env var as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def cookie(self) -> str | None:
        return self.yt_cookie.get_secret_value() if self.yt_cookie else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
