"""DTOs for the queue and playback application services."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ...domain.music.entities import QueueItem
from ...domain.music.value_objects import InputKind, PlaybackState
from ...domain.shared.types import NonNegativeInt

PLAYLIST_PREVIEW_SIZE = 10


class EnqueueResult(BaseModel):
    kind: InputKind
    items: list[QueueItem]
    position: NonNegativeInt = 0
    queue_length: NonNegativeInt = 0
    playlist_title: str | None = None
    total_available: NonNegativeInt = 0
    started: bool = False

    @property
    def first(self) -> QueueItem:
        return self.items[0]

    @property
    def added(self) -> int:
        return len(self.items)

    @property
    def is_truncated(self) -> bool:
        return self.total_available > self.added

    @property
    def preview(self) -> list[str]:
        return [item.title for item in self.items[:PLAYLIST_PREVIEW_SIZE]]


class QueueInfo(BaseModel):
    """Read-only snapshot of a guild session for the queue and now-playing views."""

    head: QueueItem | None
    upcoming: list[QueueItem] = Field(default_factory=list)
    loop_enabled: bool = False
    volume_percent: NonNegativeInt = 100
    state: PlaybackState = PlaybackState.IDLE

    @property
    def total_length(self) -> int:
        return len(self.upcoming) + (1 if self.head is not None else 0)

    @property
    def is_empty(self) -> bool:
        return self.head is None


class VolumeResult(BaseModel):
    percent: NonNegativeInt
    applied_live: bool = False
