"""Domain events for the music bounded context."""

from __future__ import annotations

from guild_jukebox.domain.music.value_objects import StreamEncoding
from guild_jukebox.domain.shared.events import DomainEvent
from guild_jukebox.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt


class PlaybackFinished(DomainEvent):
    """The voice device released a resource, naturally or because it was stopped.

    ``playback_id`` names the attached resource so late events for a resource
    that was already detached can be told apart from the current one.
    """

    guild_id: DiscordSnowflake
    playback_id: NonEmptyStr
    error: str | None = None


class TrackStartedPlaying(DomainEvent):
    guild_id: DiscordSnowflake
    title: NonEmptyStr
    url: NonEmptyStr
    encoding: StreamEncoding
    text_channel_id: DiscordSnowflake | None = None
    thumbnail_url: str | None = None
    duration_seconds: NonNegativeInt | None = None


class TrackSkippedOnFailure(DomainEvent):
    """The head could not be played and was discarded."""

    guild_id: DiscordSnowflake
    title: NonEmptyStr
    reason: str
    text_channel_id: DiscordSnowflake | None = None


class QueueExhausted(DomainEvent):
    guild_id: DiscordSnowflake
