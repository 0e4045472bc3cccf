"""Reusable voice-channel guard functions for Discord slash commands.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog. Each guard sends
its own ephemeral rejection and returns a falsy value when the caller fails it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from guild_jukebox.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from ....application.interfaces.voice_adapter import VoiceAdapter


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_MUST_BE_IN_VOICE)
        return None

    return user


async def ensure_same_voice_channel(
    interaction: discord.Interaction,
    voice_adapter: VoiceAdapter,
) -> discord.Member | None:
    """Caller must be in voice and, when the bot is connected, in the bot's channel."""
    member = await get_member(interaction)
    if member is None:
        return None

    assert interaction.guild is not None

    if not member.voice or not member.voice.channel:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_MUST_BE_IN_VOICE)
        return None

    bot_channel_id = voice_adapter.get_current_channel_id(interaction.guild.id)
    if bot_channel_id is not None and bot_channel_id != member.voice.channel.id:
        channel = interaction.guild.get_channel(bot_channel_id)
        name = channel.name if channel is not None else str(bot_channel_id)
        await send_ephemeral(interaction, DiscordUIMessages.STATE_WRONG_VOICE_CHANNEL.format(channel=name))
        return None

    return member


async def ensure_voice(
    interaction: discord.Interaction,
    voice_adapter: VoiceAdapter,
) -> discord.Member | None:
    """Same-channel check, then connect the bot to the caller's channel if needed."""
    member = await ensure_same_voice_channel(interaction, voice_adapter)
    if member is None:
        return None

    assert interaction.guild is not None
    assert member.voice is not None and member.voice.channel is not None

    if not voice_adapter.is_connected(interaction.guild.id):
        success = await voice_adapter.ensure_connected(interaction.guild.id, member.voice.channel.id)
        if not success:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
            return None

    return member
