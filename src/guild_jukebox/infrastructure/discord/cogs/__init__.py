"""Discord cogs - command handlers."""

from guild_jukebox.infrastructure.discord.cogs.music_cog import MusicCog
from guild_jukebox.infrastructure.discord.cogs.playback_cog import PlaybackCog
from guild_jukebox.infrastructure.discord.cogs.queue_cog import QueueCog

__all__ = [
    "MusicCog",
    "PlaybackCog",
    "QueueCog",
]
