"""Core domain entities for the music bounded context."""

from __future__ import annotations

import random

from pydantic import BaseModel, ConfigDict, Field

from guild_jukebox.domain.music.value_objects import (
    InputKind,
    PlaybackState,
    QueuePosition,
    extract_video_id,
)
from guild_jukebox.domain.shared.exceptions import (
    CommandValidationError,
    InvalidOperationError,
)
from guild_jukebox.domain.shared.messages import DiscordUIMessages
from guild_jukebox.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
    VolumeFloat,
)

MIN_VOLUME_PERCENT = 1
MAX_VOLUME_PERCENT = 200
MIN_ITEMS_TO_SHUFFLE = 3
UNKNOWN_TITLE = "Unknown Title"


class ResolvedMediaInfo(BaseModel):
    """Extractor-provided facts about one media item.

    Carries every locator we know for the item so the acquirer can try
    alternates when the primary fails.
    """

    model_config = ConfigDict(frozen=True)

    title: NonEmptyStr = UNKNOWN_TITLE
    video_id: NonEmptyStr | None = None
    original_url: NonEmptyStr | None = None
    webpage_url: HttpUrlStr | None = None
    stream_url: NonEmptyStr | None = None
    thumbnail_url: HttpUrlStr | None = None
    duration_seconds: DurationSeconds | None = None
    uploader: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    ext: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)

    @property
    def canonical_url(self) -> str | None:
        """Watch URL derived from the video ID, when one is known."""
        video_id = self.video_id or extract_video_id(self.webpage_url or self.original_url or "")
        if not video_id:
            return None
        return f"https://www.youtube.com/watch?v={video_id}"

    def candidate_urls(self) -> list[str]:
        """Every known locator for this item, deduplicated, discovery order preserved."""
        seen: list[str] = []
        for url in (self.original_url, self.webpage_url, self.canonical_url):
            if url and url not in seen:
                seen.append(url)
        return seen

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if self.duration_seconds is None:
            return "Unknown"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"


class QueueItem(BaseModel):
    """One entry of a guild's play queue.

    ``title`` and ``url`` are fixed at creation; ``metadata`` may be filled in
    lazily right before the item is played. Items are compared by identity
    when the driver reconciles the head, never by value.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: NonEmptyStr = Field(frozen=True)
    url: NonEmptyStr = Field(frozen=True)
    metadata: ResolvedMediaInfo | None = None

    @classmethod
    def from_info(cls, info: ResolvedMediaInfo, url: str | None = None) -> QueueItem:
        locator = url or info.webpage_url or info.original_url or info.canonical_url
        return cls(title=info.title, url=locator or info.title, metadata=info)


class ResolvedInput(BaseModel):
    """Transient result of resolving one user query."""

    model_config = ConfigDict(frozen=True)

    kind: InputKind
    items: list[QueueItem] = Field(min_length=1)
    title: NonEmptyStr | None = None
    total_available: NonNegativeInt = 0

    @property
    def is_truncated(self) -> bool:
        return self.total_available > len(self.items)


class GuildSession(BaseModel):
    """Aggregate root owning the play queue and playback flags of one guild.

    ``queue[0]`` is the head: the item currently playing or about to play.
    All positional operations index the *upcoming* part, so valid positions
    are ``1 .. len(queue) - 1``.
    """

    guild_id: DiscordSnowflake
    queue: list[QueueItem] = Field(default_factory=list)
    loop_enabled: bool = False
    volume: VolumeFloat = 1.0
    text_channel_id: DiscordSnowflake | None = None
    state: PlaybackState = PlaybackState.IDLE

    @property
    def head(self) -> QueueItem | None:
        return self.queue[0] if self.queue else None

    @property
    def upcoming(self) -> list[QueueItem]:
        return self.queue[1:]

    @property
    def is_empty(self) -> bool:
        return not self.queue

    @property
    def volume_percent(self) -> int:
        return round(self.volume * 100)

    def transition_to(self, new_state: PlaybackState) -> None:
        """Transition to a new playback state."""
        if not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
                message=f"Cannot transition from {self.state.value} to {new_state.value}",
            )
        self.state = new_state

    # ── queue mutation ─────────────────────────────────────────────

    def enqueue(self, items: list[QueueItem]) -> int:
        """Append items and return the queue index of the first one."""
        position = len(self.queue)
        self.queue.extend(items)
        return position

    def _require_position(self, position: int) -> QueuePosition:
        pos = QueuePosition(position)
        if len(self.queue) < 2:
            raise CommandValidationError(DiscordUIMessages.ERROR_NO_UPCOMING)
        if not pos.is_valid_for(len(self.queue)):
            raise CommandValidationError(
                DiscordUIMessages.ERROR_INVALID_POSITION.format(upper=len(self.queue) - 1)
            )
        return pos

    def require_head(self) -> QueueItem:
        head = self.head
        if head is None:
            raise CommandValidationError(DiscordUIMessages.STATE_QUEUE_EMPTY)
        return head

    def jump(self, position: int) -> QueueItem:
        """Move the upcoming item at ``position`` to play right after the head."""
        pos = self._require_position(position)
        item = self.queue.pop(int(pos))
        self.queue.insert(1, item)
        return item

    def remove(self, position: int) -> QueueItem:
        """Delete the upcoming item at ``position``; the head is never touched."""
        pos = self._require_position(position)
        return self.queue.pop(int(pos))

    def clear(self) -> int:
        """Truncate the queue to its head and return how many items were dropped."""
        if len(self.queue) <= 1:
            raise CommandValidationError(DiscordUIMessages.STATE_NOTHING_TO_CLEAR)
        removed = len(self.queue) - 1
        del self.queue[1:]
        return removed

    def clear_all(self) -> int:
        removed = len(self.queue)
        self.queue.clear()
        return removed

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Fisher-Yates shuffle of everything after the head."""
        if len(self.queue) < MIN_ITEMS_TO_SHUFFLE:
            raise CommandValidationError(DiscordUIMessages.STATE_NOT_ENOUGH_TO_SHUFFLE)
        rng = rng or random.Random()
        for i in range(len(self.queue) - 1, 1, -1):
            j = rng.randint(1, i)
            self.queue[i], self.queue[j] = self.queue[j], self.queue[i]

    def toggle_loop(self) -> bool:
        self.loop_enabled = not self.loop_enabled
        return self.loop_enabled

    def set_volume(self, percent: int) -> int:
        """Clamp ``percent`` to 1..200, store it as a fraction and return the clamped value."""
        clamped = max(MIN_VOLUME_PERCENT, min(MAX_VOLUME_PERCENT, int(percent)))
        self.volume = clamped / 100
        return clamped

    def bind_text_channel(self, channel_id: int | None) -> None:
        if channel_id:
            self.text_channel_id = channel_id

    # ── playback transitions ───────────────────────────────────────

    def discard_head(self, item: QueueItem) -> bool:
        """Drop ``item`` if it is still the head. Returns whether it was dropped."""
        if self.head is not item:
            return False
        self.queue.pop(0)
        return True

    def complete(self, finished: QueueItem) -> QueueItem | None:
        """Idle-advance after ``finished`` stopped playing; returns the new head.

        The finished item leaves the head only if it is still there, so a queue
        that was cleared or reordered meanwhile is left as the user made it.
        With looping on, it is re-appended to the tail instead of discarded.
        """
        if self.discard_head(finished) and self.loop_enabled:
            self.queue.append(finished)
        return self.head
