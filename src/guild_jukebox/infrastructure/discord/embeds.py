"""Embed builders shared by the cogs and the playback notifier."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from guild_jukebox.domain.shared.messages import DiscordUIMessages
from guild_jukebox.utils.reply import format_duration, format_link, format_queue_lines, truncate

if TYPE_CHECKING:
    from ...application.services.queue_models import EnqueueResult, QueueInfo
    from ...domain.music.events import TrackStartedPlaying


def _loop_label(enabled: bool) -> str:
    return DiscordUIMessages.LOOP_ON if enabled else DiscordUIMessages.LOOP_OFF


def build_now_playing_embed(info: QueueInfo) -> discord.Embed:
    assert info.head is not None
    head = info.head
    metadata = head.metadata

    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_NOW_PLAYING,
        description=format_link(head.title, head.url),
        color=discord.Color.green(),
    )
    if metadata is not None:
        if metadata.thumbnail_url:
            embed.set_thumbnail(url=metadata.thumbnail_url)
        if metadata.duration_seconds is not None:
            embed.add_field(
                name=DiscordUIMessages.EMBED_DURATION,
                value=format_duration(metadata.duration_seconds),
                inline=True,
            )
    embed.add_field(name=DiscordUIMessages.EMBED_VOLUME, value=f"{info.volume_percent}%", inline=True)
    embed.add_field(name=DiscordUIMessages.EMBED_LOOP, value=_loop_label(info.loop_enabled), inline=True)
    return embed


def build_started_embed(event: TrackStartedPlaying) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_NOW_PLAYING,
        description=format_link(event.title, event.url),
        color=discord.Color.green(),
    )
    if event.thumbnail_url:
        embed.set_thumbnail(url=event.thumbnail_url)
    if event.duration_seconds is not None:
        embed.add_field(
            name=DiscordUIMessages.EMBED_DURATION,
            value=format_duration(event.duration_seconds),
            inline=True,
        )
    return embed


def build_queue_embed(info: QueueInfo) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_QUEUE.format(total=info.total_length),
        color=discord.Color.blurple(),
    )

    if info.head is not None:
        embed.add_field(
            name=DiscordUIMessages.EMBED_NOW_PLAYING,
            value=format_link(info.head.title, info.head.url),
            inline=False,
        )

    lines, hidden = format_queue_lines([item.title for item in info.upcoming])
    if lines:
        if hidden:
            lines.append(DiscordUIMessages.EMBED_QUEUE_MORE.format(count=hidden))
        embed.add_field(name=DiscordUIMessages.EMBED_QUEUE_UP_NEXT, value="\n".join(lines), inline=False)

    embed.set_footer(
        text=f"{DiscordUIMessages.EMBED_LOOP}: {_loop_label(info.loop_enabled)}"
        f" · {DiscordUIMessages.EMBED_VOLUME}: {info.volume_percent}%"
    )
    return embed


def build_playlist_embed(result: EnqueueResult) -> discord.Embed:
    title = result.playlist_title or DiscordUIMessages.EMBED_PLAYLIST_PREVIEW
    if result.is_truncated:
        description = DiscordUIMessages.ACTION_PLAYLIST_TRUNCATED.format(
            added=result.added, total=result.total_available, title=truncate(title, 80)
        )
    else:
        description = DiscordUIMessages.ACTION_PLAYLIST_ENQUEUED.format(
            added=result.added, title=truncate(title, 80)
        )

    embed = discord.Embed(description=description, color=discord.Color.blurple())
    preview = "\n".join(
        f"`{idx}.` {truncate(name, 70)}" for idx, name in enumerate(result.preview, start=1)
    )
    if preview:
        embed.add_field(name=DiscordUIMessages.EMBED_PLAYLIST_PREVIEW, value=preview, inline=False)
    return embed
