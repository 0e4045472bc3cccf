"""Immutable value objects for the music bounded context."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


_YOUTUBE_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})"),
)


def extract_video_id(url: str) -> str | None:
    """Return the 11-character video ID embedded in a watch-style URL, if any."""
    for pattern in _YOUTUBE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


class InputKind(Enum):
    """How a user query was classified by the resolver."""

    SINGLE = "single"
    PLAYLIST = "playlist"


class StreamEncoding(Enum):
    """Container/encoding tag for an acquired byte stream.

    RAW is signed 16-bit little-endian PCM, 48 kHz, stereo.
    """

    RAW = "raw"
    OGG_OPUS = "ogg/opus"
    WEBM_OPUS = "webm/opus"
    ARBITRARY = "arbitrary"

    @property
    def is_opus(self) -> bool:
        return self in {StreamEncoding.OGG_OPUS, StreamEncoding.WEBM_OPUS}

    def supports_inline_gain(self, *, passthrough: bool = False) -> bool:
        """Whether the resource built for this encoding exposes a live volume control.

        Only Opus packets that are passed through undecoded lack a gain stage.
        """
        return not (passthrough and self.is_opus)


@dataclass(frozen=True)
class QueuePosition:
    """1-based index into the upcoming part of a queue (the head is position 0)."""

    value: int

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    def is_valid_for(self, queue_length: int) -> bool:
        return 1 <= self.value <= queue_length - 1


class PlaybackState(Enum):
    """Playback state with enforced transitions.

    State transitions:
    - IDLE -> LOADING (queue became non-empty, or a new head after idle)
    - LOADING -> LOADING (failure-skip onto the next head)
    - LOADING -> PLAYING (resource attached to the device)
    - LOADING -> IDLE (queue exhausted)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - PLAYING/PAUSED -> LOADING (idle-advance with a new head)
    - Any -> IDLE (stop, clear-all, leave, queue exhausted)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        if target is PlaybackState.IDLE:
            return True
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.LOADING},
            PlaybackState.LOADING: {PlaybackState.LOADING, PlaybackState.PLAYING},
            PlaybackState.PLAYING: {PlaybackState.PAUSED, PlaybackState.LOADING},
            PlaybackState.PAUSED: {PlaybackState.PLAYING, PlaybackState.LOADING},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}

    @property
    def is_busy(self) -> bool:
        return self is not PlaybackState.IDLE
