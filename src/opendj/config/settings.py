"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """Database configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/opendj.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://") and v != ":memory:":
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class ChatSettings(BaseModel):
    """Chat connection and moderation configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    address: str = Field(
        default="wss://chat.strims.gg/ws",
        validation_alias=AliasChoices("address", "chat_address", "ws_address"),
    )
    auth_token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("auth_token", "token")
    )
    moderators: tuple[str, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("moderators", "mods")
    )
    reconnect_delay_seconds: float = Field(default=5.0, ge=0.0, le=300.0)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        if not v.startswith(("ws://", "wss://")):
            raise ValueError(ErrorMessages.INVALID_CHAT_ADDRESS)
        return v

    @field_validator("moderators", mode="before")
    @classmethod
    def validate_moderators(cls, v: tuple[str, ...] | list[str] | str) -> tuple[str, ...]:
        """Accept a JSON list or a comma-separated string of nicks."""
        if isinstance(v, str):
            v = [part for part in v.split(",")]
        return tuple(nick.strip() for nick in v if nick and nick.strip())


class PlaybackSettings(BaseModel):
    """Scheduler and request policy configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    idle_backoff_seconds: float = Field(default=5.0, gt=0.0, le=300.0)
    max_duration_seconds: int = Field(default=600, ge=1, le=86_400)
    max_queued_seconds_per_user: int | None = Field(default=None, ge=1)
    count_current_in_cap: bool = False
    progress_bar_width: int = Field(default=15, ge=1, le=100)


class RendererSettings(BaseModel):
    """External ffmpeg renderer configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    ffmpeg_path: str = "ffmpeg"
    ingest: str = Field(
        default="rtmp://localhost/live/",
        validation_alias=AliasChoices("ingest", "ingest_url"),
    )
    key: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("key", "stream_key")
    )
    audio_codec: str = "aac"
    output_format: str = "flv"
    reconnect_delay_max: int = Field(default=3, ge=0, le=60)
    terminate_timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)

    @property
    def output_url(self) -> str:
        return self.ingest + self.key.get_secret_value()


class ResolverSettings(BaseModel):
    """yt-dlp resolver configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    ytdlp_format: str = "bestaudio/best"
    socket_timeout: int = Field(default=10, ge=1, le=120)


class MessagingSettings(BaseModel):
    """Outbound message pacing."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    send_interval_ms: int = Field(default=400, ge=0, le=10_000)
    outbox_size: int = Field(default=100, ge=1, le=10_000)


class VotingSettings(BaseModel):
    """Skip vote and like configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    skip_threshold_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    min_skip_votes: int = Field(default=1, ge=1)
    backup_min_likes: int = Field(default=3, ge=1)
    backup_rotation_size: int = Field(default=50, ge=0, le=1000)


class PublisherSettings(BaseModel):
    """Playlist export configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    paste_url: str = "https://hastebin.com"
    upload_timeout_seconds: float = Field(default=1.0, gt=0.0, le=60.0)
    fallback_path: str = "playlist.txt"
    file_host_url: str = "https://uguu.se/api.php?d=upload-tool"
    file_host_timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - CHAT__ADDRESS, CHAT__AUTH_TOKEN, CHAT__MODERATORS (nested with prefix)
    - RENDERER__INGEST, RENDERER__KEY, PLAYBACK__IDLE_BACKOFF_SECONDS, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    chat: ChatSettings = Field(default_factory=ChatSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    renderer: RendererSettings = Field(default_factory=RendererSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    messaging: MessagingSettings = Field(default_factory=MessagingSettings)
    voting: VotingSettings = Field(default_factory=VotingSettings)
    publisher: PublisherSettings = Field(default_factory=PublisherSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


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
