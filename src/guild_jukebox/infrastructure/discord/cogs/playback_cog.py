"""Slash-command cog for playback control: skip, pause, resume, stop, volume, leave."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from guild_jukebox.domain.music.entities import MAX_VOLUME_PERCENT, MIN_VOLUME_PERCENT
from guild_jukebox.domain.shared.exceptions import CommandValidationError
from guild_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from guild_jukebox.infrastructure.discord.guards.voice_guards import (
    ensure_same_voice_channel,
    send_ephemeral,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class PlaybackCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _guild_for_control(self, interaction: discord.Interaction) -> int | None:
        member = await ensure_same_voice_channel(interaction, self.container.voice_adapter)
        if member is None or interaction.guild is None:
            return None
        return interaction.guild.id

    @app_commands.command(name="skip", description="Skip the current item.")
    async def skip(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_control(interaction)
        if guild_id is None:
            return

        # Skipping while nothing is attached loads the next item inline.
        await interaction.response.defer()

        try:
            await self.container.playback_service.skip(guild_id)
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.followup.send(DiscordUIMessages.ACTION_SKIPPED)

    @app_commands.command(name="pause", description="Pause playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_control(interaction)
        if guild_id is None:
            return

        if await self.container.playback_service.pause(guild_id):
            await interaction.response.send_message(DiscordUIMessages.ACTION_PAUSED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_TO_PAUSE)

    @app_commands.command(name="resume", description="Resume paused playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_control(interaction)
        if guild_id is None:
            return

        if await self.container.playback_service.resume(guild_id):
            await interaction.response.send_message(DiscordUIMessages.ACTION_RESUMED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PAUSED)

    @app_commands.command(name="stop", description="Stop playback and clear the queue.")
    async def stop(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_control(interaction)
        if guild_id is None:
            return

        await self.container.playback_service.stop(guild_id)
        await interaction.response.send_message(DiscordUIMessages.ACTION_STOPPED)

    @app_commands.command(name="vol", description="Set the playback volume.")
    @app_commands.describe(percent=f"Volume percentage ({MIN_VOLUME_PERCENT}-{MAX_VOLUME_PERCENT})")
    async def vol(self, interaction: discord.Interaction, percent: int) -> None:
        guild_id = await self._guild_for_control(interaction)
        if guild_id is None:
            return

        result = await self.container.playback_service.set_volume(guild_id, percent)
        await interaction.response.send_message(
            DiscordUIMessages.ACTION_VOLUME_SET.format(percent=result.percent)
        )

    @app_commands.command(name="leave", description="Disconnect from the voice channel.")
    async def leave(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_control(interaction)
        if guild_id is None:
            return

        try:
            await self.container.playback_service.leave(guild_id)
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_DISCONNECTED)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PlaybackCog(bot, container))
