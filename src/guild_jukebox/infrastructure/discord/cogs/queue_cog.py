"""Slash-command cog for queue management: view, now playing, jump, remove, clear, shuffle, loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from guild_jukebox.domain.shared.exceptions import CommandValidationError
from guild_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from guild_jukebox.infrastructure.discord.embeds import build_now_playing_embed, build_queue_embed
from guild_jukebox.infrastructure.discord.guards.voice_guards import (
    ensure_same_voice_channel,
    get_member,
    send_ephemeral,
)
from guild_jukebox.utils.reply import truncate

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class QueueCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _guild_for_mutation(self, interaction: discord.Interaction) -> int | None:
        member = await ensure_same_voice_channel(interaction, self.container.voice_adapter)
        if member is None or interaction.guild is None:
            return None
        return interaction.guild.id

    @app_commands.command(name="queue", description="Show the current queue.")
    async def queue(self, interaction: discord.Interaction) -> None:
        if await get_member(interaction) is None:
            return

        assert interaction.guild is not None

        info = await self.container.queue_service.get_queue(interaction.guild.id)
        if info.is_empty:
            await interaction.response.send_message(DiscordUIMessages.STATE_QUEUE_EMPTY, ephemeral=True)
            return

        await interaction.response.send_message(embed=build_queue_embed(info))

    @app_commands.command(name="np", description="Show what is playing now.")
    async def np(self, interaction: discord.Interaction) -> None:
        if await get_member(interaction) is None:
            return

        assert interaction.guild is not None

        info = await self.container.queue_service.get_queue(interaction.guild.id)
        if info.is_empty:
            await interaction.response.send_message(DiscordUIMessages.STATE_NOTHING_PLAYING, ephemeral=True)
            return

        await interaction.response.send_message(embed=build_now_playing_embed(info))

    @app_commands.command(name="jump", description="Play an upcoming item next and skip to it.")
    @app_commands.describe(position="Position in the upcoming queue (1 = next)")
    async def jump(self, interaction: discord.Interaction, position: int) -> None:
        guild_id = await self._guild_for_mutation(interaction)
        if guild_id is None:
            return

        await interaction.response.defer()

        try:
            item = await self.container.playback_service.jump(guild_id, position)
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.followup.send(
            DiscordUIMessages.ACTION_JUMPED.format(title=truncate(item.title, 80))
        )

    @app_commands.command(name="remove", description="Remove an upcoming item from the queue.")
    @app_commands.describe(position="Position in the upcoming queue (1 = next)")
    async def remove(self, interaction: discord.Interaction, position: int) -> None:
        guild_id = await self._guild_for_mutation(interaction)
        if guild_id is None:
            return

        try:
            item = await self.container.queue_service.remove(guild_id, position)
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(
            DiscordUIMessages.ACTION_TRACK_REMOVED.format(title=truncate(item.title, 80))
        )

    @app_commands.command(name="clear", description="Remove everything after the current item.")
    async def clear(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_mutation(interaction)
        if guild_id is None:
            return

        try:
            count = await self.container.queue_service.clear(guild_id)
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_QUEUE_CLEARED.format(count=count))

    @app_commands.command(name="clearall", description="Empty the queue and stop playback.")
    async def clearall(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_mutation(interaction)
        if guild_id is None:
            return

        await self.container.playback_service.clear_all(guild_id)
        await interaction.response.send_message(DiscordUIMessages.ACTION_QUEUE_CLEARED_ALL)

    @app_commands.command(name="shuffle", description="Shuffle the upcoming items.")
    async def shuffle(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_mutation(interaction)
        if guild_id is None:
            return

        try:
            await self.container.queue_service.shuffle(guild_id)
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_SHUFFLED)

    @app_commands.command(name="loop", description="Toggle re-queueing finished items at the end.")
    async def loop(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_for_mutation(interaction)
        if guild_id is None:
            return

        enabled = await self.container.queue_service.toggle_loop(guild_id)
        await interaction.response.send_message(
            DiscordUIMessages.ACTION_LOOP_ON if enabled else DiscordUIMessages.ACTION_LOOP_OFF
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(QueueCog(bot, container))
