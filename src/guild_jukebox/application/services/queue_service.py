"""Queue Application Service - resolves input and mutates guild queues."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from ...domain.music.value_objects import PlaybackState
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake, NonEmptyStr
from .queue_models import EnqueueResult, QueueInfo

if TYPE_CHECKING:
    from ...domain.music.entities import QueueItem
    from ...domain.music.repository import SessionRepository
    from ..interfaces.input_resolver import InputResolver
    from .playback_service import PlaybackApplicationService

logger = logging.getLogger(__name__)


class QueueApplicationService:
    """Manages queue operations (enqueue, remove, clear, shuffle, loop) for guilds.

    Operations that touch the playing resource (skip, jump, stop) live on
    the playback service.
    """

    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        input_resolver: InputResolver,
        playback_service: PlaybackApplicationService,
        rng: random.Random | None = None,
    ) -> None:
        self._session_repo = session_repository
        self._resolver = input_resolver
        self._playback = playback_service
        self._rng = rng

    async def enqueue(
        self,
        guild_id: DiscordSnowflake,
        query: NonEmptyStr,
        text_channel_id: DiscordSnowflake | None = None,
    ) -> EnqueueResult:
        """Resolve ``query`` and append the result; start loading in the background when Idle.

        Raises:
            ResolutionError: Nothing playable was found. The queue is untouched.
        """
        resolved = await self._resolver.resolve(query)

        session = await self._session_repo.get_or_create(guild_id)
        session.bind_text_channel(text_channel_id)
        position = session.enqueue(resolved.items)
        logger.info(LogTemplates.QUEUE_ENQUEUED, len(resolved.items), guild_id, len(session.queue))

        # Loading runs in the background; its outcome reaches the text channel as notices.
        started = False
        if session.state is PlaybackState.IDLE:
            started = self._playback.schedule_playback(guild_id) is not None

        return EnqueueResult(
            kind=resolved.kind,
            items=resolved.items,
            position=position,
            queue_length=len(session.queue),
            playlist_title=resolved.title,
            total_available=resolved.total_available,
            started=started,
        )

    async def remove(self, guild_id: DiscordSnowflake, position: int) -> QueueItem:
        session = await self._session_repo.get_or_create(guild_id)
        item = session.remove(position)
        logger.info(LogTemplates.QUEUE_REMOVED, item.title, guild_id)
        return item

    async def clear(self, guild_id: DiscordSnowflake) -> int:
        session = await self._session_repo.get_or_create(guild_id)
        count = session.clear()
        logger.info(LogTemplates.QUEUE_CLEARED, count, guild_id)
        return count

    async def shuffle(self, guild_id: DiscordSnowflake) -> None:
        session = await self._session_repo.get_or_create(guild_id)
        session.shuffle(self._rng)
        logger.info(LogTemplates.QUEUE_SHUFFLED, guild_id)

    async def toggle_loop(self, guild_id: DiscordSnowflake) -> bool:
        session = await self._session_repo.get_or_create(guild_id)
        enabled = session.toggle_loop()
        logger.info(LogTemplates.LOOP_TOGGLED, "enabled" if enabled else "disabled", guild_id)
        return enabled

    async def bind_text_channel(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake | None) -> None:
        session = await self._session_repo.get_or_create(guild_id)
        session.bind_text_channel(channel_id)

    async def get_queue(self, guild_id: DiscordSnowflake) -> QueueInfo:
        session = await self._session_repo.get(guild_id)
        if session is None:
            return QueueInfo(head=None)

        return QueueInfo(
            head=session.head,
            upcoming=list(session.upcoming),
            loop_enabled=session.loop_enabled,
            volume_percent=session.volume_percent,
            state=session.state,
        )
