"""
Tests for PlaybackApplicationService - the per-guild playback state machine.

Covers loading and attaching the head, failure-skip with its bounded retry,
idle-advance on device events (including stale ones), head reconciliation
after suspensions, pause/resume, skip/jump, clear-all, leave and volume.
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from guild_jukebox.application.services.playback_service import PlaybackApplicationService
from guild_jukebox.domain.music.events import (
    PlaybackFinished,
    QueueExhausted,
    TrackSkippedOnFailure,
    TrackStartedPlaying,
)
from guild_jukebox.domain.music.value_objects import PlaybackState, StreamEncoding
from guild_jukebox.domain.shared.exceptions import (
    AllStrategiesFailedError,
    CommandValidationError,
    DeviceError,
    InfoUnavailableError,
)
from guild_jukebox.domain.shared.messages import DiscordUIMessages


def _of(events, event_type):
    return [e for e in events if isinstance(e, event_type)]


async def _finish(service, guild_id: int = 1) -> None:
    """Simulate the device reporting the attached resource released."""
    attached = service.attached(guild_id)
    assert attached is not None
    await service.handle_playback_finished(
        PlaybackFinished(guild_id=guild_id, playback_id=attached.playback_id)
    )


# =============================================================================
# Loading -> Playing
# =============================================================================


class TestStartPlayback:
    async def test_registers_finish_callback(self, playback_service, voice_adapter):
        voice_adapter.set_on_playback_finished.assert_called_once_with(
            playback_service.handle_playback_finished
        )

    async def test_attaches_head_and_publishes_started(
        self, playback_service, session, make_item, voice_adapter, published
    ):
        item = make_item("Song X")
        session.enqueue([item])
        session.bind_text_channel(444)

        assert await playback_service.start_playback(1) is True

        assert session.state is PlaybackState.PLAYING
        voice_adapter.play.assert_awaited_once()
        assert voice_adapter.play.await_args.args[2] == session.volume
        attached = playback_service.attached(1)
        assert attached.item is item
        assert attached.playback_id == "pb-1"

        started = _of(published, TrackStartedPlaying)
        assert len(started) == 1
        assert started[0].title == "Song X"
        assert started[0].text_channel_id == 444
        assert started[0].duration_seconds == 200

    async def test_empty_queue_goes_idle_with_exhausted(self, playback_service, session, published):
        assert await playback_service.start_playback(1) is False
        assert session.state is PlaybackState.IDLE
        assert len(_of(published, QueueExhausted)) == 1

    async def test_lazy_metadata_is_fetched_before_acquire(
        self, playback_service, session, make_item, input_resolver, stream_acquirer
    ):
        item = make_item("Lazy", resolved=False)
        fetched = make_item("Lazy").metadata
        input_resolver.fetch_info.return_value = fetched
        session.enqueue([item])

        await playback_service.start_playback(1)

        input_resolver.fetch_info.assert_awaited_once_with(item.url)
        stream_acquirer.acquire.assert_awaited_once_with(fetched)
        assert item.metadata == fetched

    async def test_concurrent_start_is_ignored(
        self, playback_service, session, make_item, stream_acquirer, make_stream
    ):
        session.enqueue([make_item("A")])
        nested = []

        async def acquire(info):
            nested.append(await playback_service.start_playback(1))
            return make_stream()

        stream_acquirer.acquire.side_effect = acquire

        assert await playback_service.start_playback(1) is True
        assert nested == [False]
        assert not playback_service.is_loading(1)

    async def test_unexpected_error_propagates_and_resets_to_idle(
        self, playback_service, session, make_item, stream_acquirer
    ):
        session.enqueue([make_item("A")])
        stream_acquirer.acquire.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            await playback_service.start_playback(1)

        assert session.state is PlaybackState.IDLE
        assert len(session.queue) == 1
        assert not playback_service.is_loading(1)


# =============================================================================
# Failure-skip
# =============================================================================


class TestFailureSkip:
    async def test_every_item_failing_ends_idle_with_one_notice_each(
        self, playback_service, session, make_item, stream_acquirer, voice_adapter, published
    ):
        session.enqueue([make_item("A"), make_item("B"), make_item("C")])
        stream_acquirer.acquire.side_effect = AllStrategiesFailedError("x")

        assert await playback_service.start_playback(1) is False

        assert session.state is PlaybackState.IDLE
        assert session.is_empty
        skipped = _of(published, TrackSkippedOnFailure)
        assert [e.title for e in skipped] == ["A", "B", "C"]
        assert len(_of(published, QueueExhausted)) == 1
        voice_adapter.play.assert_not_awaited()

    async def test_single_item_failure_emits_one_notice(
        self, playback_service, session, make_item, stream_acquirer, published
    ):
        session.enqueue([make_item("Only")])
        stream_acquirer.acquire.side_effect = AllStrategiesFailedError("Only")

        await playback_service.start_playback(1)

        assert session.is_empty
        assert session.state is PlaybackState.IDLE
        assert len(_of(published, TrackSkippedOnFailure)) == 1

    async def test_failed_item_is_skipped_and_next_plays(
        self, playback_service, session, make_item, stream_acquirer, make_stream, published
    ):
        bad, good = make_item("Bad"), make_item("Good")
        session.enqueue([bad, good])

        async def acquire(info):
            if info.title == "Bad":
                raise AllStrategiesFailedError("Bad")
            return make_stream()

        stream_acquirer.acquire.side_effect = acquire

        assert await playback_service.start_playback(1) is True

        assert session.queue == [good]
        assert playback_service.attached(1).item is good
        assert [e.title for e in _of(published, TrackSkippedOnFailure)] == ["Bad"]

    async def test_info_fetch_failure_skips_item(
        self, playback_service, session, make_item, input_resolver, published
    ):
        lazy, good = make_item("Gone", resolved=False), make_item("Good")
        session.enqueue([lazy, good])
        input_resolver.fetch_info.side_effect = InfoUnavailableError(lazy.url, "removed")

        assert await playback_service.start_playback(1) is True
        assert session.head is good
        assert _of(published, TrackSkippedOnFailure)[0].reason.startswith("No media info")

    async def test_device_error_skips_item(
        self, playback_service, session, make_item, voice_adapter, published
    ):
        session.enqueue([make_item("A"), make_item("B")])
        voice_adapter.play.side_effect = [DeviceError(1, "refused"), "pb-9"]

        assert await playback_service.start_playback(1) is True
        assert session.head.title == "B"
        assert playback_service.attached(1).playback_id == "pb-9"

    async def test_retry_budget_is_queue_length_at_first_failure(
        self, playback_service, session, make_item, stream_acquirer, published
    ):
        session.enqueue([make_item("A"), make_item("B")])

        async def acquire(info):
            # Something keeps enqueueing while the original items fail.
            if not info.title.startswith("late"):
                session.enqueue([make_item(f"late-{info.title}")])
            raise AllStrategiesFailedError(info.title)

        stream_acquirer.acquire.side_effect = acquire

        assert await playback_service.start_playback(1) is False

        assert session.state is PlaybackState.IDLE
        # Budget is 3: A, B and late-A were queued when A failed.
        assert [e.title for e in _of(published, TrackSkippedOnFailure)] == ["A", "B", "late-A"]
        assert [i.title for i in session.queue] == ["late-B"]
        assert _of(published, QueueExhausted) == []


# =============================================================================
# Idle-advance
# =============================================================================


class TestIdleAdvance:
    async def test_song_x_lifecycle(
        self,
        queue_service,
        playback_service,
        session_repository,
        input_resolver,
        make_item,
        published,
        settle,
    ):
        from guild_jukebox.domain.music.entities import ResolvedInput
        from guild_jukebox.domain.music.value_objects import InputKind

        item = make_item("Song X")
        input_resolver.resolve.return_value = ResolvedInput(
            kind=InputKind.SINGLE, items=[item], total_available=1
        )

        result = await queue_service.enqueue(1, "https://www.youtube.com/watch?v=songx000001")
        await settle()

        session = await session_repository.get(1)
        assert result.started is True
        assert [i.title for i in session.queue] == ["Song X"]
        assert session.state is PlaybackState.PLAYING

        await _finish(playback_service)

        assert session.queue == []
        assert session.state is PlaybackState.IDLE
        assert playback_service.attached(1) is None
        assert len(_of(published, QueueExhausted)) == 1

    async def test_advance_without_loop(self, playback_service, session, make_item, voice_adapter):
        a, b, c = make_item("A"), make_item("B"), make_item("C")
        session.enqueue([a, b, c])
        await playback_service.start_playback(1)

        await _finish(playback_service)

        assert session.queue == [b, c]
        assert playback_service.attached(1).item is b
        assert session.state is PlaybackState.PLAYING
        assert voice_adapter.play.await_count == 2

    async def test_advance_with_loop_recycles_to_tail(self, playback_service, session, make_item):
        a, b, c = make_item("A"), make_item("B"), make_item("C")
        session.enqueue([a, b, c])
        session.toggle_loop()
        await playback_service.start_playback(1)

        await _finish(playback_service)

        assert session.queue == [b, c, a]
        assert playback_service.attached(1).item is b

    async def test_stale_finish_event_is_ignored(
        self, playback_service, session, make_item, voice_adapter
    ):
        session.enqueue([make_item("A"), make_item("B")])
        await playback_service.start_playback(1)

        await playback_service.handle_playback_finished(PlaybackFinished(guild_id=1, playback_id="pb-old"))

        assert [i.title for i in session.queue] == ["A", "B"]
        assert voice_adapter.play.await_count == 1
        assert session.state is PlaybackState.PLAYING

    async def test_finish_for_unknown_guild_is_ignored(self, playback_service, voice_adapter):
        await playback_service.handle_playback_finished(PlaybackFinished(guild_id=99, playback_id="pb-1"))
        voice_adapter.play.assert_not_awaited()


# =============================================================================
# Head reconciliation
# =============================================================================


class TestHeadReconciliation:
    async def test_head_removed_during_acquire_releases_stream(
        self, playback_service, session, make_item, stream_acquirer, make_stream, voice_adapter
    ):
        a, b = make_item("A"), make_item("B")
        session.enqueue([a, b])
        abandoned = MagicMock()

        async def acquire(info):
            if info.title == "A":
                session.discard_head(a)
                return abandoned
            return make_stream()

        stream_acquirer.acquire.side_effect = acquire

        assert await playback_service.start_playback(1) is True

        abandoned.release.assert_called_once()
        voice_adapter.play.assert_awaited_once()
        assert playback_service.attached(1).item is b

    async def test_head_removed_during_fetch_skips_acquire(
        self, playback_service, session, make_item, input_resolver, stream_acquirer
    ):
        lazy, b = make_item("Lazy", resolved=False), make_item("B")
        session.enqueue([lazy, b])

        async def fetch(url):
            session.discard_head(lazy)
            return make_item("Lazy").metadata

        input_resolver.fetch_info.side_effect = fetch

        await playback_service.start_playback(1)

        stream_acquirer.acquire.assert_awaited_once_with(b.metadata)
        assert playback_service.attached(1).item is b

    async def test_skip_during_loading_advances_without_stop(
        self, playback_service, session, make_item, stream_acquirer, make_stream, voice_adapter
    ):
        a, b = make_item("A"), make_item("B")
        session.enqueue([a, b])
        skipped = []

        async def acquire(info):
            if info.title == "A":
                skipped.append(await playback_service.skip(1))
            return make_stream()

        stream_acquirer.acquire.side_effect = acquire

        await playback_service.start_playback(1)

        assert skipped == [a]
        voice_adapter.stop.assert_not_awaited()
        assert session.queue == [b]
        assert playback_service.attached(1).item is b

    async def test_skipped_item_failing_to_load_is_not_a_failure_skip(
        self, playback_service, session, make_item, input_resolver, voice_adapter, published, settle
    ):
        a, b = make_item("A", resolved=False), make_item("B")
        session.enqueue([a, b])
        release = asyncio.Event()

        async def fetch(url):
            await release.wait()
            raise InfoUnavailableError(url, "removed")

        input_resolver.fetch_info.side_effect = fetch

        loading = asyncio.create_task(playback_service.start_playback(1))
        await asyncio.sleep(0)
        assert await playback_service.skip(1) is a
        release.set()

        assert await loading is True
        await settle()

        assert session.queue == [b]
        assert session.state is PlaybackState.PLAYING
        assert playback_service.attached(1).item is b
        voice_adapter.play.assert_awaited_once()
        assert _of(published, TrackSkippedOnFailure) == []

    async def test_head_removed_before_failure_keeps_budget_for_the_rest(
        self, playback_service, session, make_item, stream_acquirer, make_stream, published
    ):
        a, b, c = make_item("A"), make_item("B"), make_item("C")
        session.enqueue([a, b, c])

        async def acquire(info):
            if info.title == "A":
                session.discard_head(a)
                raise AllStrategiesFailedError("A")
            if info.title == "B":
                raise AllStrategiesFailedError("B")
            return make_stream()

        stream_acquirer.acquire.side_effect = acquire

        assert await playback_service.start_playback(1) is True

        assert playback_service.attached(1).item is c
        assert [e.title for e in _of(published, TrackSkippedOnFailure)] == ["B"]


# =============================================================================
# Background loading
# =============================================================================


class TestScheduledPlayback:
    async def test_schedule_runs_start_playback(self, playback_service, session, make_item, settle):
        session.enqueue([make_item("A")])

        task = playback_service.schedule_playback(1)

        assert task is not None
        assert playback_service.pending == (task,)
        await settle()
        assert await task is True
        assert playback_service.pending == ()
        assert session.state is PlaybackState.PLAYING

    async def test_schedule_while_pending_returns_none(self, playback_service, session, make_item, settle):
        session.enqueue([make_item("A")])

        first = playback_service.schedule_playback(1)

        assert playback_service.schedule_playback(1) is None
        await settle()
        assert first.done()

    async def test_schedule_while_loading_returns_none(
        self, playback_service, session, make_item, stream_acquirer, make_stream
    ):
        session.enqueue([make_item("A")])
        scheduled = []

        async def acquire(info):
            scheduled.append(playback_service.schedule_playback(1))
            return make_stream()

        stream_acquirer.acquire.side_effect = acquire

        await playback_service.start_playback(1)

        assert scheduled == [None]

    async def test_task_failure_is_logged(self, playback_service, session, make_item, stream_acquirer):
        session.enqueue([make_item("A")])
        stream_acquirer.acquire.side_effect = RuntimeError("bug")

        with patch("guild_jukebox.application.services.playback_service.logger") as log:
            task = playback_service.schedule_playback(1)
            with pytest.raises(RuntimeError):
                await task
            await asyncio.sleep(0)

        log.error.assert_called_once()
        assert log.error.call_args.kwargs["exc_info"] is task.exception()
        assert playback_service.pending == ()

    async def test_shutdown_cancels_pending_loads(
        self, playback_service, session, make_item, stream_acquirer
    ):
        session.enqueue([make_item("A")])
        never = asyncio.Event()

        async def acquire(info):
            await never.wait()

        stream_acquirer.acquire.side_effect = acquire
        task = playback_service.schedule_playback(1)
        await asyncio.sleep(0)

        await playback_service.shutdown()

        assert task.cancelled()
        assert playback_service.pending == ()
        assert not playback_service.is_loading(1)


# =============================================================================
# Commands
# =============================================================================


class TestPauseResume:
    async def test_pause_when_idle_is_benign_mismatch(self, playback_service, session, voice_adapter):
        assert await playback_service.pause(1) is False
        voice_adapter.pause.assert_not_awaited()

    async def test_pause_resume_cycle(self, playback_service, session, make_item):
        session.enqueue([make_item("A")])
        await playback_service.start_playback(1)

        assert await playback_service.pause(1) is True
        assert session.state is PlaybackState.PAUSED
        assert await playback_service.pause(1) is False

        assert await playback_service.resume(1) is True
        assert session.state is PlaybackState.PLAYING
        assert await playback_service.resume(1) is False

    async def test_pause_refused_by_device_keeps_state(
        self, playback_service, session, make_item, voice_adapter
    ):
        session.enqueue([make_item("A")])
        await playback_service.start_playback(1)
        voice_adapter.pause.return_value = False

        assert await playback_service.pause(1) is False
        assert session.state is PlaybackState.PLAYING


class TestSkipAndJump:
    async def test_skip_stops_attached_resource(self, playback_service, session, make_item, voice_adapter):
        a = make_item("A")
        session.enqueue([a, make_item("B")])
        await playback_service.start_playback(1)

        assert await playback_service.skip(1) is a

        voice_adapter.stop.assert_awaited_once_with(1)
        # The queue only moves once the device reports the resource finished.
        assert session.head is a

    async def test_skip_on_empty_queue_rejects(self, playback_service, session):
        with pytest.raises(CommandValidationError) as exc:
            await playback_service.skip(1)
        assert exc.value.message == DiscordUIMessages.STATE_QUEUE_EMPTY

    async def test_skip_when_nothing_attached_advances_directly(
        self, playback_service, session, make_item, voice_adapter, settle
    ):
        a, b = make_item("A"), make_item("B")
        session.enqueue([a, b])

        await playback_service.skip(1)
        await settle()

        voice_adapter.stop.assert_not_awaited()
        assert session.queue == [b]
        assert playback_service.attached(1).item is b

    async def test_jump_reorders_then_skips(self, playback_service, session, make_item, voice_adapter):
        a, b, c, d = (make_item(t) for t in "ABCD")
        session.enqueue([a, b, c, d])
        await playback_service.start_playback(1)

        moved = await playback_service.jump(1, 2)

        assert moved is c
        assert session.queue == [a, c, b, d]
        voice_adapter.stop.assert_awaited_once()

        await _finish(playback_service)
        assert playback_service.attached(1).item is c

    async def test_jump_out_of_range_does_not_stop(self, playback_service, session, make_item, voice_adapter):
        session.enqueue([make_item("A"), make_item("B")])
        await playback_service.start_playback(1)

        with pytest.raises(CommandValidationError):
            await playback_service.jump(1, 5)
        voice_adapter.stop.assert_not_awaited()


class TestClearAllAndLeave:
    async def test_clear_all_goes_idle_and_ignores_late_finish(
        self, playback_service, session, make_item, voice_adapter, published
    ):
        session.enqueue([make_item("A"), make_item("B")])
        await playback_service.start_playback(1)
        playback_id = playback_service.attached(1).playback_id

        assert await playback_service.clear_all(1) == 2

        assert session.is_empty
        assert session.state is PlaybackState.IDLE
        voice_adapter.stop.assert_awaited_once_with(1)

        await playback_service.handle_playback_finished(PlaybackFinished(guild_id=1, playback_id=playback_id))
        assert voice_adapter.play.await_count == 1
        assert _of(published, QueueExhausted) == []

    async def test_stop_is_clear_all(self, playback_service, session, make_item):
        session.enqueue([make_item("A")])
        await playback_service.start_playback(1)

        await playback_service.stop(1)

        assert session.is_empty
        assert session.state is PlaybackState.IDLE

    async def test_leave_requires_connection(self, playback_service, session, voice_adapter):
        voice_adapter.is_connected.return_value = False

        with pytest.raises(CommandValidationError) as exc:
            await playback_service.leave(1)

        assert exc.value.message == DiscordUIMessages.STATE_NOT_CONNECTED_TO_VOICE
        voice_adapter.disconnect.assert_not_awaited()

    async def test_leave_clears_and_disconnects(self, playback_service, session, make_item, voice_adapter):
        session.enqueue([make_item("A")])
        await playback_service.start_playback(1)

        await playback_service.leave(1)

        assert session.is_empty
        voice_adapter.disconnect.assert_awaited_once_with(1)


class TestVolume:
    async def test_volume_applied_live_when_resource_has_gain(
        self, playback_service, session, make_item, voice_adapter
    ):
        session.enqueue([make_item("A")])
        await playback_service.start_playback(1)

        result = await playback_service.set_volume(1, 150)

        assert result.percent == 150
        assert result.applied_live is True
        voice_adapter.set_volume.assert_called_once_with(1, 1.5)

    async def test_volume_stored_when_nothing_attached(self, playback_service, session, voice_adapter):
        result = await playback_service.set_volume(1, 250)

        assert result.percent == 200
        assert result.applied_live is False
        assert session.volume == 2.0
        voice_adapter.set_volume.assert_not_called()

    async def test_volume_deferred_for_passthrough_opus(
        self, session_repository, voice_adapter, input_resolver, stream_acquirer, event_bus, make_item
    ):
        service = PlaybackApplicationService(
            session_repository=session_repository,
            voice_adapter=voice_adapter,
            input_resolver=input_resolver,
            stream_acquirer=stream_acquirer,
            event_bus=event_bus,
            passthrough=True,
        )
        session = await session_repository.get_or_create(1)
        session.enqueue([make_item("A")])
        await service.start_playback(1)
        assert service.attached(1).encoding is StreamEncoding.WEBM_OPUS

        result = await service.set_volume(1, 50)

        assert result.applied_live is False
        voice_adapter.set_volume.assert_not_called()

    async def test_next_resource_uses_stored_volume(self, playback_service, session, make_item, voice_adapter):
        session.enqueue([make_item("A"), make_item("B")])
        await playback_service.start_playback(1)
        await playback_service.set_volume(1, 40)

        await _finish(playback_service)

        assert voice_adapter.play.await_args.args[2] == pytest.approx(0.4)
