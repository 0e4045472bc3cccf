"""Slash-command cog for getting audio going: join and play."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from guild_jukebox.domain.music.value_objects import InputKind
from guild_jukebox.domain.shared.exceptions import CommandValidationError, ResolutionError
from guild_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from guild_jukebox.infrastructure.discord.embeds import build_playlist_embed
from guild_jukebox.infrastructure.discord.guards.voice_guards import ensure_voice, send_ephemeral
from guild_jukebox.utils.reply import truncate

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        member = await ensure_voice(interaction, self.container.voice_adapter)
        if member is None:
            return

        assert interaction.guild is not None
        assert member.voice is not None and member.voice.channel is not None

        await self.container.queue_service.bind_text_channel(
            interaction.guild.id, interaction.channel_id
        )
        await interaction.response.send_message(
            DiscordUIMessages.ACTION_JOINED.format(channel=member.voice.channel.name)
        )

    @app_commands.command(name="play", description="Play a URL, a playlist, or the top search result.")
    @app_commands.describe(query="Video URL, playlist URL or search text")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        # Resolution and connecting can both exceed the 3-second interaction deadline.
        await interaction.response.defer()

        member = await ensure_voice(interaction, self.container.voice_adapter)
        if member is None:
            return

        assert interaction.guild is not None

        try:
            result = await self.container.queue_service.enqueue(
                interaction.guild.id,
                query,
                text_channel_id=interaction.channel_id,
            )
        except ResolutionError as e:
            logger.info(LogTemplates.RESOLVE_FAILED, query, e)
            await send_ephemeral(
                interaction, DiscordUIMessages.ERROR_NOTHING_FOUND.format(query=truncate(query, 80))
            )
            return
        except CommandValidationError as e:
            await send_ephemeral(interaction, e.message)
            return

        if result.kind is InputKind.PLAYLIST:
            await interaction.followup.send(embed=build_playlist_embed(result))
            return

        # Whether the load succeeds is posted to the text channel by the notifier.
        title = truncate(result.first.title, 80)
        if result.started:
            await interaction.followup.send(DiscordUIMessages.ACTION_LOADING.format(title=title))
        elif result.position == 0:
            await interaction.followup.send(DiscordUIMessages.ACTION_QUEUED.format(title=title))
        else:
            await interaction.followup.send(
                DiscordUIMessages.ACTION_ENQUEUED.format(title=title, position=result.position)
            )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
