"""Posts playback events to each guild's bound text channel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from guild_jukebox.domain.music.events import QueueExhausted, TrackSkippedOnFailure, TrackStartedPlaying
from guild_jukebox.domain.shared.messages import DiscordUIMessages, LogTemplates
from guild_jukebox.infrastructure.discord.embeds import build_started_embed
from guild_jukebox.utils.reply import truncate

if TYPE_CHECKING:
    from ....domain.music.repository import SessionRepository
    from ....domain.shared.events import EventBus

logger = logging.getLogger(__name__)


class DiscordPlaybackNotifier:
    """Subscribes to playback events and sends one message per event.

    Events without a bound channel are dropped silently; send failures are
    logged and never reach the playback driver.
    """

    def __init__(
        self,
        bot: discord.Client,
        event_bus: EventBus,
        session_repository: SessionRepository,
    ) -> None:
        self._bot = bot
        self._event_bus = event_bus
        self._session_repo = session_repository
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._event_bus.subscribe(TrackStartedPlaying, self.on_track_started)
        self._event_bus.subscribe(TrackSkippedOnFailure, self.on_track_skipped)
        self._event_bus.subscribe(QueueExhausted, self.on_queue_exhausted)
        self._started = True
        logger.debug(LogTemplates.NOTIFIER_STARTED)

    def stop(self) -> None:
        if not self._started:
            return
        self._event_bus.unsubscribe(TrackStartedPlaying, self.on_track_started)
        self._event_bus.unsubscribe(TrackSkippedOnFailure, self.on_track_skipped)
        self._event_bus.unsubscribe(QueueExhausted, self.on_queue_exhausted)
        self._started = False
        logger.debug(LogTemplates.NOTIFIER_STOPPED)

    def _channel(self, channel_id: int | None) -> discord.abc.Messageable | None:
        if channel_id is None:
            return None
        channel = self._bot.get_channel(channel_id)
        return channel if isinstance(channel, discord.abc.Messageable) else None

    async def _send(self, channel_id: int | None, **kwargs: object) -> None:
        channel = self._channel(channel_id)
        if channel is None:
            return
        try:
            await channel.send(**kwargs)  # type: ignore[arg-type]
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTIFY_SEND_FAILED, channel_id, e)

    async def on_track_started(self, event: TrackStartedPlaying) -> None:
        await self._send(event.text_channel_id, embed=build_started_embed(event))

    async def on_track_skipped(self, event: TrackSkippedOnFailure) -> None:
        await self._send(
            event.text_channel_id,
            content=DiscordUIMessages.NOTIFY_SKIPPED_ON_FAILURE.format(title=truncate(event.title, 80)),
        )

    async def on_queue_exhausted(self, event: QueueExhausted) -> None:
        session = await self._session_repo.get(event.guild_id)
        if session is None:
            return
        await self._send(session.text_channel_id, content=DiscordUIMessages.NOTIFY_QUEUE_FINISHED)

