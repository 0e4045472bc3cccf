"""Tests for MusicCog: join and play."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from guild_jukebox.application.services.queue_models import EnqueueResult
from guild_jukebox.domain.music.value_objects import InputKind
from guild_jukebox.domain.shared.exceptions import EmptyPlaylistError, NoResolvableCandidateError
from guild_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from guild_jukebox.infrastructure.discord.cogs.music_cog import MusicCog, setup


@pytest.fixture
def cog(mock_container):
    return MusicCog(MagicMock(), mock_container)


def _result(make_item, *, position=0, kind=InputKind.SINGLE, items=None, **kwargs) -> EnqueueResult:
    return EnqueueResult(
        kind=kind,
        items=items or [make_item("Song X")],
        position=position,
        queue_length=position + 1,
        **kwargs,
    )


# =============================================================================
# /join
# =============================================================================


class TestJoin:
    async def test_join_binds_channel(self, cog, interaction, mock_container):
        mock_container.voice_adapter.is_connected.return_value = False

        await cog.join.callback(cog, interaction)

        mock_container.voice_adapter.ensure_connected.assert_awaited_once_with(111, 333)
        mock_container.queue_service.bind_text_channel.assert_awaited_once_with(111, 444)
        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.ACTION_JOINED.format(channel="Lounge")
        )

    async def test_join_outside_voice(self, cog, interaction, mock_container):
        interaction.user.voice = None

        await cog.join.callback(cog, interaction)

        mock_container.queue_service.bind_text_channel.assert_not_awaited()
        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_MUST_BE_IN_VOICE, ephemeral=True
        )

    async def test_join_connect_failure(self, cog, interaction, mock_container):
        mock_container.voice_adapter.is_connected.return_value = False
        mock_container.voice_adapter.ensure_connected.return_value = False

        await cog.join.callback(cog, interaction)

        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE, ephemeral=True
        )


# =============================================================================
# /play
# =============================================================================


class TestPlay:
    async def test_play_on_idle_reports_loading(self, cog, interaction, mock_container, make_item):
        mock_container.queue_service.enqueue.return_value = _result(make_item, started=True)

        await cog.play.callback(cog, interaction, "song x")

        interaction.response.defer.assert_awaited_once()
        mock_container.queue_service.enqueue.assert_awaited_once_with(111, "song x", text_channel_id=444)
        interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ACTION_LOADING.format(title="Song X")
        )

    async def test_play_head_not_started_is_not_reported_as_playing(
        self, cog, interaction, mock_container, make_item
    ):
        mock_container.queue_service.enqueue.return_value = _result(make_item, position=0, started=False)

        await cog.play.callback(cog, interaction, "song x")

        interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ACTION_QUEUED.format(title="Song X")
        )

    async def test_play_resolution_failure_is_logged_with_template(self, cog, interaction, mock_container):
        interaction.response.is_done.return_value = True
        error = NoResolvableCandidateError("zzz", 3)
        mock_container.queue_service.enqueue.side_effect = error

        with patch("guild_jukebox.infrastructure.discord.cogs.music_cog.logger") as log:
            await cog.play.callback(cog, interaction, "zzz")

        log.info.assert_called_once_with(LogTemplates.RESOLVE_FAILED, "zzz", error)

    async def test_play_enqueued_reports_position(self, cog, interaction, mock_container, make_item):
        mock_container.queue_service.enqueue.return_value = _result(make_item, position=3)

        await cog.play.callback(cog, interaction, "song x")

        interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ACTION_ENQUEUED.format(title="Song X", position=3)
        )

    async def test_play_playlist_sends_embed(self, cog, interaction, mock_container, make_item):
        mock_container.queue_service.enqueue.return_value = _result(
            make_item,
            kind=InputKind.PLAYLIST,
            items=[make_item("A"), make_item("B")],
            playlist_title="Mix",
            total_available=2,
        )

        await cog.play.callback(cog, interaction, "https://www.youtube.com/playlist?list=PL1")

        embed = interaction.followup.send.call_args.kwargs["embed"]
        assert embed.description == DiscordUIMessages.ACTION_PLAYLIST_ENQUEUED.format(added=2, title="Mix")

    @pytest.mark.parametrize(
        "error",
        [EmptyPlaylistError("https://e.com/list"), NoResolvableCandidateError("zzz", 3)],
    )
    async def test_play_resolution_failure_is_ephemeral(self, cog, interaction, mock_container, error):
        interaction.response.is_done.return_value = True
        mock_container.queue_service.enqueue.side_effect = error

        await cog.play.callback(cog, interaction, "zzz")

        interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ERROR_NOTHING_FOUND.format(query="zzz"), ephemeral=True
        )

    async def test_play_rejected_in_other_channel(self, cog, interaction, mock_container):
        interaction.response.is_done.return_value = True
        mock_container.voice_adapter.get_current_channel_id.return_value = 999
        interaction.guild.get_channel.return_value = MagicMock()
        interaction.guild.get_channel.return_value.name = "Stage"

        await cog.play.callback(cog, interaction, "song")

        mock_container.queue_service.enqueue.assert_not_awaited()
        interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.STATE_WRONG_VOICE_CHANNEL.format(channel="Stage"), ephemeral=True
        )


# =============================================================================
# setup
# =============================================================================


class TestSetup:
    async def test_setup_requires_container(self):
        bot = MagicMock(spec=["add_cog"])
        with pytest.raises(RuntimeError, match=ErrorMessages.CONTAINER_NOT_FOUND):
            await setup(bot)

    async def test_setup_adds_cog(self, mock_container):
        bot = MagicMock()
        bot.container = mock_container
        bot.add_cog = AsyncMock()

        await setup(bot)

        assert isinstance(bot.add_cog.call_args.args[0], MusicCog)
