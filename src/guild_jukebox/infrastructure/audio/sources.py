"""Builds discord.py audio sources from acquired streams."""

from __future__ import annotations

import logging

import discord

from guild_jukebox.application.interfaces.stream_acquirer import AcquiredStream
from guild_jukebox.infrastructure.audio.transcoder import FFmpegConfig

logger = logging.getLogger(__name__)


class TranscodedPCMAudio(discord.PCMAudio):
    """Raw PCM read from a transcoder pipe; cleanup kills the transcoder."""

    def __init__(self, stream: AcquiredStream) -> None:
        super().__init__(stream.source)  # type: ignore[arg-type]
        self._acquired = stream

    def cleanup(self) -> None:
        self._acquired.release()


def build_audio_source(
    stream: AcquiredStream,
    volume: float,
    config: FFmpegConfig,
    *,
    passthrough: bool = False,
) -> discord.AudioSource:
    """Create the device resource for ``stream``.

    Raw pipes and decoded locators get a ``PCMVolumeTransformer`` so gain is
    live; Opus locators are only left undecoded when ``passthrough`` is set.
    """
    if stream.is_pipe:
        return discord.PCMVolumeTransformer(TranscodedPCMAudio(stream), volume=volume)

    locator = str(stream.source)
    before_options = config.get_before_options(stream.headers)

    if passthrough and stream.encoding.is_opus:
        return discord.FFmpegOpusAudio(
            locator,
            codec="copy",
            executable=config.executable,
            before_options=before_options,
            options=config.get_options(),
        )

    source = discord.FFmpegPCMAudio(
        locator,
        executable=config.executable,
        before_options=before_options,
        options=config.get_options(),
    )
    return discord.PCMVolumeTransformer(source, volume=volume)
