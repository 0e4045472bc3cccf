"""Playback Application Service - the per-guild playback state machine.

Drives the head of each guild's queue through Loading and Playing, advances
the queue when the voice device reports a resource finished, and discards
items that cannot be fetched, acquired or attached.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...domain.music.events import (
    PlaybackFinished,
    QueueExhausted,
    TrackSkippedOnFailure,
    TrackStartedPlaying,
)
from ...domain.music.value_objects import PlaybackState, StreamEncoding
from ...domain.shared.events import EventBus, get_event_bus
from ...domain.shared.exceptions import (
    AcquisitionError,
    CommandValidationError,
    DeviceError,
    ResolutionError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .queue_models import VolumeResult

if TYPE_CHECKING:
    from ...domain.music.entities import GuildSession, QueueItem
    from ...domain.music.repository import SessionRepository
    from ..interfaces.input_resolver import InputResolver
    from ..interfaces.stream_acquirer import AcquiredStream, StreamAcquirer
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)

# Failures that cost one queue item instead of stopping the guild.
ITEM_FAILURES = (ResolutionError, AcquisitionError, DeviceError)


@dataclass(frozen=True)
class AttachedResource:
    item: QueueItem
    playback_id: str
    encoding: StreamEncoding


class PlaybackApplicationService:
    """Orchestrates metadata fetch, stream acquisition and the voice device per guild."""

    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        voice_adapter: VoiceAdapter,
        input_resolver: InputResolver,
        stream_acquirer: StreamAcquirer,
        event_bus: EventBus | None = None,
        passthrough: bool = False,
    ) -> None:
        self._session_repo = session_repository
        self._voice_adapter = voice_adapter
        self._resolver = input_resolver
        self._acquirer = stream_acquirer
        self._event_bus = event_bus or get_event_bus()
        self._passthrough = passthrough

        self._attached: dict[DiscordSnowflake, AttachedResource] = {}
        self._loading: set[DiscordSnowflake] = set()
        self._tasks: dict[DiscordSnowflake, asyncio.Task[bool]] = {}

        self._voice_adapter.set_on_playback_finished(self.handle_playback_finished)

    def attached(self, guild_id: DiscordSnowflake) -> AttachedResource | None:
        return self._attached.get(guild_id)

    def is_loading(self, guild_id: DiscordSnowflake) -> bool:
        return guild_id in self._loading

    @property
    def pending(self) -> tuple[asyncio.Task[bool], ...]:
        return tuple(task for task in self._tasks.values() if not task.done())

    # ── Loading ────────────────────────────────────────────────────

    async def start_playback(self, guild_id: DiscordSnowflake) -> bool:
        """Load and attach the current head, skipping items that fail.

        Returns True once something is playing. A call made while this guild
        is already loading is ignored: the running loop re-reads the head
        after every suspension and picks up whatever changed.
        """
        if guild_id in self._loading:
            logger.debug(LogTemplates.PLAYBACK_ALREADY_LOADING, guild_id)
            return False

        self._loading.add(guild_id)
        try:
            session = await self._session_repo.get_or_create(guild_id)
            return await self._drive(session)
        finally:
            self._loading.discard(guild_id)

    def schedule_playback(self, guild_id: DiscordSnowflake) -> asyncio.Task[bool] | None:
        """Run ``start_playback`` in the background so commands can reply right away.

        Returns None when this guild is already loading or has a load queued.
        """
        task = self._tasks.get(guild_id)
        if guild_id in self._loading or (task is not None and not task.done()):
            logger.debug(LogTemplates.PLAYBACK_ALREADY_LOADING, guild_id)
            return None

        task = asyncio.create_task(self.start_playback(guild_id), name=f"playback-{guild_id}")
        self._tasks[guild_id] = task
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[bool]) -> None:
        for guild_id, tracked in list(self._tasks.items()):
            if tracked is task:
                del self._tasks[guild_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(LogTemplates.PLAYBACK_TASK_FAILED, task.get_name(), exc_info=exc)

    async def shutdown(self) -> None:
        """Cancel background loads still in flight."""
        tasks = self.pending
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(LogTemplates.PLAYBACK_TASKS_CANCELLED, len(tasks))

    async def _drive(self, session: GuildSession) -> bool:
        guild_id = session.guild_id
        budget: int | None = None

        while True:
            item = session.head
            if item is None:
                await self._finish_idle(session, exhausted=True)
                return False
            if budget is not None and budget <= 0:
                logger.warning(LogTemplates.PLAYBACK_RETRY_BUDGET_SPENT, guild_id, len(session.queue))
                await self._finish_idle(session, exhausted=False)
                return False

            session.transition_to(PlaybackState.LOADING)
            logger.info(LogTemplates.PLAYBACK_LOADING, item.title, guild_id)

            try:
                stream = await self._load(session, item)
                if stream is None:
                    logger.info(LogTemplates.PLAYBACK_HEAD_CHANGED, item.title, guild_id)
                    continue
                playback_id = await self._voice_adapter.play(guild_id, stream, session.volume)
            except ITEM_FAILURES as e:
                # Already skipped or removed: not a failure of the current head.
                if session.head is not item:
                    logger.info(LogTemplates.PLAYBACK_HEAD_CHANGED, item.title, guild_id)
                    continue
                if budget is None:
                    budget = len(session.queue)
                budget -= 1
                await self._skip_failed(session, item, e)
                continue
            except Exception:
                session.transition_to(PlaybackState.IDLE)
                raise

            self._attached[guild_id] = AttachedResource(item, playback_id, stream.encoding)
            session.transition_to(PlaybackState.PLAYING)
            logger.info(LogTemplates.PLAYBACK_STARTED, item.title, guild_id)

            metadata = item.metadata
            await self._event_bus.publish(
                TrackStartedPlaying(
                    guild_id=guild_id,
                    title=item.title,
                    url=item.url,
                    encoding=stream.encoding,
                    text_channel_id=session.text_channel_id,
                    thumbnail_url=metadata.thumbnail_url if metadata else None,
                    duration_seconds=metadata.duration_seconds if metadata else None,
                )
            )
            return True

    async def _load(self, session: GuildSession, item: QueueItem) -> AcquiredStream | None:
        """Fetch metadata if missing, then acquire a stream.

        Returns None when ``item`` stopped being the head during a suspension.
        """
        if item.metadata is None:
            item.metadata = await self._resolver.fetch_info(item.url)
            if session.head is not item:
                return None

        stream = await self._acquirer.acquire(item.metadata)
        if session.head is not item:
            stream.release()
            return None
        return stream

    async def _skip_failed(self, session: GuildSession, item: QueueItem, error: Exception) -> None:
        logger.warning(LogTemplates.PLAYBACK_ITEM_SKIPPED, item.title, session.guild_id, error)
        session.discard_head(item)
        await self._event_bus.publish(
            TrackSkippedOnFailure(
                guild_id=session.guild_id,
                title=item.title,
                reason=str(error),
                text_channel_id=session.text_channel_id,
            )
        )

    async def _finish_idle(self, session: GuildSession, *, exhausted: bool) -> None:
        session.transition_to(PlaybackState.IDLE)
        if exhausted:
            logger.info(LogTemplates.QUEUE_EXHAUSTED, session.guild_id)
            await self._event_bus.publish(QueueExhausted(guild_id=session.guild_id))

    # ── Device events ──────────────────────────────────────────────

    async def handle_playback_finished(self, event: PlaybackFinished) -> None:
        """Idle-advance after the device released the attached resource."""
        guild_id = event.guild_id
        attached = self._attached.get(guild_id)
        if attached is None or attached.playback_id != event.playback_id:
            logger.debug(LogTemplates.PLAYBACK_STALE_EVENT, event.playback_id, guild_id)
            return

        del self._attached[guild_id]
        logger.info(LogTemplates.PLAYBACK_FINISHED, guild_id, event.error)

        session = await self._session_repo.get(guild_id)
        if session is None:
            return

        recycled = session.loop_enabled and session.head is attached.item
        session.complete(attached.item)
        if recycled:
            logger.info(LogTemplates.QUEUE_RECYCLED, attached.item.title, guild_id)

        if guild_id in self._loading:
            return
        await self.start_playback(guild_id)

    # ── Commands ───────────────────────────────────────────────────

    async def skip(self, guild_id: DiscordSnowflake) -> QueueItem:
        """Stop the head; the device's finish event then advances the queue."""
        session = await self._session_repo.get_or_create(guild_id)
        head = session.require_head()

        if guild_id in self._attached and self._voice_adapter.is_active(guild_id):
            await self._voice_adapter.stop(guild_id)
            return head

        # Nothing attached (loading, or idle after a spent retry budget): advance here.
        self._attached.pop(guild_id, None)
        session.complete(head)
        self.schedule_playback(guild_id)
        return head

    async def jump(self, guild_id: DiscordSnowflake, position: int) -> QueueItem:
        """Move the upcoming item at ``position`` right after the head, then skip to it."""
        session = await self._session_repo.get_or_create(guild_id)
        item = session.jump(position)
        logger.info(LogTemplates.QUEUE_JUMPED, item.title, position, guild_id)
        await self.skip(guild_id)
        return item

    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        """Pause when Playing; returns False on any other state."""
        session = await self._session_repo.get_or_create(guild_id)
        if session.state is not PlaybackState.PLAYING:
            return False
        if not await self._voice_adapter.pause(guild_id):
            return False
        session.transition_to(PlaybackState.PAUSED)
        logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
        return True

    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        """Resume when Paused; returns False on any other state."""
        session = await self._session_repo.get_or_create(guild_id)
        if session.state is not PlaybackState.PAUSED:
            return False
        if not await self._voice_adapter.resume(guild_id):
            return False
        session.transition_to(PlaybackState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
        return True

    async def clear_all(self, guild_id: DiscordSnowflake) -> int:
        """Empty the queue, detach the resource and go Idle. Returns the number of items dropped."""
        session = await self._session_repo.get_or_create(guild_id)
        removed = session.clear_all()
        # Forget the resource first so its finish event is treated as stale.
        self._attached.pop(guild_id, None)
        await self._voice_adapter.stop(guild_id)
        await self._finish_idle(session, exhausted=False)
        logger.info(LogTemplates.QUEUE_CLEARED_ALL, removed, guild_id)
        return removed

    async def stop(self, guild_id: DiscordSnowflake) -> int:
        return await self.clear_all(guild_id)

    async def leave(self, guild_id: DiscordSnowflake) -> None:
        if not self._voice_adapter.is_connected(guild_id):
            raise CommandValidationError(DiscordUIMessages.STATE_NOT_CONNECTED_TO_VOICE)
        await self.clear_all(guild_id)
        await self._voice_adapter.disconnect(guild_id)

    async def set_volume(self, guild_id: DiscordSnowflake, percent: int) -> VolumeResult:
        """Store the clamped volume and apply it live when the attached resource has gain."""
        session = await self._session_repo.get_or_create(guild_id)
        clamped = session.set_volume(percent)

        applied = False
        attached = self._attached.get(guild_id)
        if attached is not None and attached.encoding.supports_inline_gain(passthrough=self._passthrough):
            applied = self._voice_adapter.set_volume(guild_id, session.volume)

        if applied:
            logger.info(LogTemplates.PLAYBACK_VOLUME_LIVE, session.volume, guild_id)
        else:
            logger.info(LogTemplates.PLAYBACK_VOLUME_DEFERRED, session.volume, guild_id)
        return VolumeResult(percent=clamped, applied_live=applied)
