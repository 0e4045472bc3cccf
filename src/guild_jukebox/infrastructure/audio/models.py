"""Pydantic models for yt-dlp data transformation and configuration.

These are infrastructure-specific models for parsing external extractor data
and configuring yt-dlp options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guild_jukebox.domain.music.entities import UNKNOWN_TITLE, ResolvedMediaInfo
from guild_jukebox.domain.shared.types import NonEmptyStr, NonNegativeInt, PositiveInt

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_PLAYLIST_TITLE: Final[str] = "Playlist"


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class YtDlpMediaInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are silently ignored. Before-validators coerce
    garbage from external data gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    webpage_url: NonEmptyStr | None = None
    original_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    thumbnail: NonEmptyStr | None = None
    duration: NonNegativeInt | None = None
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    ext: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator(
        "id", "webpage_url", "original_url", "url", "thumbnail",
        "uploader", "channel", "acodec", "ext",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        """Coerce to non-negative int; return None for garbage values."""
        if v is None:
            return None
        try:
            val = int(v)
            return val if val >= 0 else None
        except (TypeError, ValueError):
            return None

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k): str(val) for k, val in v.items()}

    @property
    def page_url(self) -> str | None:
        """The watch-page locator, which flat entries sometimes put in ``url``."""
        if self.webpage_url:
            return self.webpage_url
        if self.url and self.url.startswith(("http://", "https://")) and "googlevideo" not in self.url:
            return self.url
        if self.id:
            return f"https://www.youtube.com/watch?v={self.id}"
        return None

    def to_media_info(self, original_url: str | None = None, *, flat: bool = False) -> ResolvedMediaInfo:
        """Convert to the domain model. Flat entries carry no stream locator."""
        webpage = self.webpage_url if self.webpage_url and self.webpage_url.startswith("http") else None
        thumbnail = self.thumbnail if self.thumbnail and self.thumbnail.startswith("http") else None
        return ResolvedMediaInfo(
            title=self.title,
            video_id=self.id,
            original_url=original_url or self.original_url,
            webpage_url=webpage,
            stream_url=None if flat else self.url,
            thumbnail_url=thumbnail,
            duration_seconds=self.duration,
            uploader=self.uploader or self.channel,
            acodec=self.acodec,
            ext=self.ext,
            http_headers=self.http_headers,
        )


class YtDlpPlaylist(BaseModel):
    """Flat playlist extraction result."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: NonEmptyStr = DEFAULT_PLAYLIST_TITLE
    entries: list[YtDlpMediaInfo] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return DEFAULT_PLAYLIST_TITLE
        return v

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_empty_entries(cls, v: Any) -> list[Any]:
        if v is None:
            return []
        return [e for e in v if isinstance(e, dict)]


# ── yt-dlp option models ───────────────────────────────────────────────


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
    playlistend: PositiveInt | None = None
    http_headers: dict[str, str] | None = None

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
