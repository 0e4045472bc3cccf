"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the session registry, audio adapters, and the
playback and queue services. Components are created on first access and
cached for the lifetime of the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.input_resolver import InputResolver
    from ..application.interfaces.stream_acquirer import StreamAcquirer
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.playback_service import PlaybackApplicationService
    from ..application.services.queue_service import QueueApplicationService
    from ..domain.music.repository import SessionRepository
    from ..domain.shared.events import EventBus
    from ..infrastructure.audio.probe import StreamProbe
    from ..infrastructure.audio.strategies import StreamStrategy
    from ..infrastructure.discord.services.notifier import DiscordPlaybackNotifier
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    _event_bus: EventBus | None = None
    _session_repository: SessionRepository | None = None

    # Infrastructure adapters
    _input_resolver: InputResolver | None = None
    _stream_probe: StreamProbe | None = None
    _stream_strategies: tuple[StreamStrategy, ...] | None = None
    _stream_acquirer: StreamAcquirer | None = None
    _voice_adapter: VoiceAdapter | None = None

    # Application services
    _playback_service: PlaybackApplicationService | None = None
    _queue_service: QueueApplicationService | None = None

    # Event subscribers
    _notifier: DiscordPlaybackNotifier | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    # === Session registry ===

    @property
    def session_repository(self) -> SessionRepository:
        """Get the per-guild session registry."""
        if self._session_repository is None:
            from ..infrastructure.memory.session_registry import InMemorySessionRegistry

            self._session_repository = InMemorySessionRegistry(
                default_volume=self.settings.audio.default_volume
            )
        return self._session_repository

    # === Infrastructure Adapters ===

    @property
    def input_resolver(self) -> InputResolver:
        """Get the yt-dlp input resolver."""
        if self._input_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._input_resolver = YtDlpResolver(
                self.settings.audio,
                playlist_max=self.settings.playlist_max,
                cookie=self.settings.cookie,
            )
        return self._input_resolver

    @property
    def stream_probe(self) -> StreamProbe:
        if self._stream_probe is None:
            from ..infrastructure.audio.probe import StreamProbe

            self._stream_probe = StreamProbe(
                timeout=self.settings.audio.probe_timeout_s,
                cookie=self.settings.cookie,
            )
        return self._stream_probe

    @property
    def stream_strategies(self) -> tuple[StreamStrategy, ...]:
        """The acquisition chain in the order it is tried."""
        if self._stream_strategies is None:
            from ..infrastructure.audio.strategies import (
                AlternateExtractorStrategy,
                DirectExtractionStrategy,
                SubprocessTranscodeStrategy,
            )
            from ..infrastructure.audio.transcoder import FFmpegConfig

            audio = self.settings.audio
            self._stream_strategies = (
                DirectExtractionStrategy(self.input_resolver, self.stream_probe),
                AlternateExtractorStrategy(self.stream_probe),
                SubprocessTranscodeStrategy(
                    FFmpegConfig(
                        executable=audio.ffmpeg_executable,
                        reconnect_delay_max=audio.reconnect_delay_max,
                    ),
                    ytdlp_executable=audio.ytdlp_executable,
                    cookie=self.settings.cookie,
                    locator_timeout=audio.locator_timeout_s,
                ),
            )
        return self._stream_strategies

    @property
    def stream_acquirer(self) -> StreamAcquirer:
        """Get the fallback stream acquirer."""
        if self._stream_acquirer is None:
            from ..infrastructure.audio.stream_acquirer import FallbackStreamAcquirer

            self._stream_acquirer = FallbackStreamAcquirer(self.stream_strategies, self.input_resolver)
        return self._stream_acquirer

    @property
    def voice_adapter(self) -> VoiceAdapter:
        """Get the voice adapter."""
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.audio)
        return self._voice_adapter

    # === Application Services ===

    @property
    def playback_service(self) -> PlaybackApplicationService:
        """Get the playback application service."""
        if self._playback_service is None:
            from ..application.services.playback_service import PlaybackApplicationService

            self._playback_service = PlaybackApplicationService(
                session_repository=self.session_repository,
                voice_adapter=self.voice_adapter,
                input_resolver=self.input_resolver,
                stream_acquirer=self.stream_acquirer,
                event_bus=self.event_bus,
                passthrough=self.settings.audio.prefer_passthrough,
            )
        return self._playback_service

    @property
    def queue_service(self) -> QueueApplicationService:
        """Get the queue application service."""
        if self._queue_service is None:
            from ..application.services.queue_service import QueueApplicationService

            self._queue_service = QueueApplicationService(
                session_repository=self.session_repository,
                input_resolver=self.input_resolver,
                playback_service=self.playback_service,
            )
        return self._queue_service

    # === Event Subscribers ===

    @property
    def notifier(self) -> DiscordPlaybackNotifier:
        """Get the text-channel playback notifier."""
        if self._notifier is None:
            from ..infrastructure.discord.services.notifier import DiscordPlaybackNotifier

            self._notifier = DiscordPlaybackNotifier(
                self.bot, self.event_bus, self.session_repository
            )
        return self._notifier

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Wire the playback driver to the device and start event subscribers."""
        # Building the service registers its finish callback on the voice adapter.
        _ = self.playback_service
        self.notifier.start()

    async def shutdown(self) -> None:
        """Stop subscribers and release any transcoders still attached."""
        try:
            if self._notifier is not None:
                self._notifier.stop()
        except Exception as exc:
            logger.warning("Failed stopping playback notifier: %r", exc)

        if self._session_repository is not None and self._playback_service is not None:
            await self._playback_service.shutdown()
            for session in await self._session_repository.all():
                if session.queue:
                    await self._playback_service.clear_all(session.guild_id)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
