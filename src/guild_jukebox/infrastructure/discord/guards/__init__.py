"""Voice channel guard functions for Discord cogs."""

from guild_jukebox.infrastructure.discord.guards.voice_guards import (
    ensure_same_voice_channel,
    ensure_voice,
    get_member,
    send_ephemeral,
)

__all__ = [
    "ensure_same_voice_channel",
    "ensure_voice",
    "get_member",
    "send_ephemeral",
]
