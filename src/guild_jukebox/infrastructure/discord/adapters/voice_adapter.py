"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING
from uuid import uuid4

import discord

from guild_jukebox.application.interfaces.voice_adapter import VoiceAdapter
from guild_jukebox.config.settings import AudioSettings
from guild_jukebox.domain.music.events import PlaybackFinished
from guild_jukebox.domain.shared.exceptions import DeviceError
from guild_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from guild_jukebox.infrastructure.audio.sources import build_audio_source
from guild_jukebox.infrastructure.audio.transcoder import FFmpegConfig

if TYPE_CHECKING:
    from ....application.interfaces.stream_acquirer import AcquiredStream

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0
MAX_GAIN: float = 2.0


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._ffmpeg = FFmpegConfig(
            executable=self._settings.ffmpeg_executable,
            reconnect_delay_max=self._settings.reconnect_delay_max,
        )
        self._on_finished: Callable[[PlaybackFinished], Awaitable[None]] | None = None

    @property
    def ffmpeg(self) -> FFmpegConfig:
        return self._ffmpeg

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    def _get_voice_channel(
        self, guild_id: int, channel_id: int
    ) -> tuple[discord.Guild | None, discord.VoiceChannel | discord.StageChannel | None]:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            return None, None

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            return guild, None
        return guild, channel

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        guild, channel = self._get_voice_channel(guild_id, channel_id)
        if guild is None or channel is None:
            return False

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                await channel.connect(self_deaf=True)
            logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False
        except Exception:
            logger.exception(LogTemplates.VOICE_CONNECT_FAILED, channel_id)
            return False

    async def disconnect(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        try:
            await vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
            return True
        except Exception:
            logger.exception(LogTemplates.VOICE_DISCONNECT_FAILED, guild_id)
            return False

    async def ensure_connected(self, guild_id: int, channel_id: int) -> bool:
        """Connect if not connected, move if in a different channel."""
        vc = self._get_voice_client(guild_id)

        if vc and not vc.is_connected():
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await self.disconnect(guild_id)
            vc = None

        if vc and vc.channel:
            if vc.channel.id == channel_id:
                return True
            return await self.move_to(guild_id, channel_id)

        return await self.connect(guild_id, channel_id)

    async def move_to(self, guild_id: int, channel_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return await self.connect(guild_id, channel_id)

        guild, channel = self._get_voice_channel(guild_id, channel_id)
        if guild is None or channel is None:
            return False

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                await vc.move_to(channel)
            try:
                await guild.change_voice_state(channel=channel, self_deaf=True)
            except discord.HTTPException as e:
                logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild_id, e)
            logger.info(LogTemplates.VOICE_MOVED, channel.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_MOVE_TIMEOUT, channel_id)
            return False
        except Exception:
            logger.exception(LogTemplates.VOICE_MOVE_FAILED, channel_id)
            return False

    async def play(self, guild_id: int, stream: AcquiredStream, volume: float) -> str:
        vc = self._get_voice_client(guild_id)
        if not vc:
            stream.release()
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            raise DeviceError(guild_id, ErrorMessages.NOT_CONNECTED.format(guild_id=guild_id))

        # Detach whatever is still attached; its finish event arrives with a stale id.
        if vc.is_playing() or vc.is_paused():
            vc.stop()

        playback_id = uuid4().hex
        try:
            source = build_audio_source(
                stream,
                volume,
                self._ffmpeg,
                passthrough=self._settings.prefer_passthrough,
            )
            vc.play(source, after=self._make_after(guild_id, playback_id))
        except Exception as e:
            stream.release()
            logger.error(LogTemplates.VOICE_ADAPTER_FAILED, guild_id, exc_info=True)
            raise DeviceError(guild_id, str(e) or type(e).__name__) from e

        logger.info(LogTemplates.PLAYBACK_ATTACHED, stream.encoding.value, playback_id, guild_id)
        return playback_id

    def _make_after(self, guild_id: int, playback_id: str) -> Callable[[Exception | None], None]:
        def after_callback(error: Exception | None = None) -> None:
            # Runs on the voice player thread.
            if error:
                logger.warning(LogTemplates.PLAYBACK_DEVICE_ERROR, guild_id, error)
            event = PlaybackFinished(
                guild_id=guild_id,
                playback_id=playback_id,
                error=str(error) if error else None,
            )
            asyncio.run_coroutine_threadsafe(self._dispatch_finished(event), self._bot.loop)

        return after_callback

    async def _dispatch_finished(self, event: PlaybackFinished) -> None:
        if self._on_finished is None:
            logger.warning(LogTemplates.PLAYBACK_NO_CALLBACK, event.guild_id)
            return
        try:
            await self._on_finished(event)
        except Exception as e:
            logger.error(LogTemplates.PLAYBACK_CALLBACK_ERROR, event.guild_id, e, exc_info=True)

    async def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_playing() or vc.is_paused():
            vc.stop()
            logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
            return True
        return False

    async def pause(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if vc and vc.is_playing():
            vc.pause()
            return True
        return False

    async def resume(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if vc and vc.is_paused():
            vc.resume()
            return True
        return False

    def set_volume(self, guild_id: int, volume: float) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not isinstance(vc.source, discord.PCMVolumeTransformer):
            return False
        vc.source.volume = max(0.0, min(MAX_GAIN, volume))
        return True

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    def is_active(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and (vc.is_playing() or vc.is_paused())

    def get_current_channel_id(self, guild_id: int) -> int | None:
        vc = self._get_voice_client(guild_id)
        if vc and vc.channel:
            return vc.channel.id
        return None

    def set_on_playback_finished(
        self,
        callback: Callable[[PlaybackFinished], Awaitable[None]],
    ) -> None:
        self._on_finished = callback
