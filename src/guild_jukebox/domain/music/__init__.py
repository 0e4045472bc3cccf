"""
Music Bounded Context

Domain logic for queue items, per-guild sessions and playback state.
"""

from guild_jukebox.domain.music.entities import (
    GuildSession,
    QueueItem,
    ResolvedInput,
    ResolvedMediaInfo,
)
from guild_jukebox.domain.music.events import (
    PlaybackFinished,
    QueueExhausted,
    TrackSkippedOnFailure,
    TrackStartedPlaying,
)
from guild_jukebox.domain.music.repository import SessionRepository
from guild_jukebox.domain.music.value_objects import (
    InputKind,
    PlaybackState,
    QueuePosition,
    StreamEncoding,
)

__all__ = [
    # Entities
    "QueueItem",
    "ResolvedMediaInfo",
    "ResolvedInput",
    "GuildSession",
    # Value Objects
    "InputKind",
    "PlaybackState",
    "QueuePosition",
    "StreamEncoding",
    # Events
    "PlaybackFinished",
    "TrackStartedPlaying",
    "TrackSkippedOnFailure",
    "QueueExhausted",
    # Repository
    "SessionRepository",
]
