import asyncio
import itertools
import random
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
import pytest_asyncio

# ============================================================================
# Event Bus Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_global_event_bus():
    """Keep the process-wide bus from leaking handlers between tests."""
    from guild_jukebox.domain.shared.events import reset_event_bus

    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def event_bus():
    from guild_jukebox.domain.shared.events import EventBus

    return EventBus()


@pytest.fixture
def published(event_bus):
    """Collects every playback event published on ``event_bus``, in order."""
    from guild_jukebox.domain.music.events import (
        QueueExhausted,
        TrackSkippedOnFailure,
        TrackStartedPlaying,
    )

    events = []

    async def record(event):
        events.append(event)

    for event_type in (TrackStartedPlaying, TrackSkippedOnFailure, QueueExhausted):
        event_bus.subscribe(event_type, record)
    return events


# ============================================================================
# Session Registry Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def session_repository():
    from guild_jukebox.infrastructure.memory.session_registry import InMemorySessionRegistry

    return InMemorySessionRegistry()


@pytest_asyncio.fixture
async def session(session_repository):
    """Session for guild 1, registered in ``session_repository``."""
    return await session_repository.get_or_create(1)


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def make_item():
    """Factory for queue items; ``resolved=False`` leaves metadata to be fetched lazily."""
    from guild_jukebox.domain.music.entities import QueueItem, ResolvedMediaInfo

    counter = itertools.count(1)

    def _make(title: str, *, resolved: bool = True):
        n = next(counter)
        url = f"https://www.youtube.com/watch?v=item{n:07d}"
        metadata = None
        if resolved:
            metadata = ResolvedMediaInfo(
                title=title,
                original_url=url,
                stream_url=f"https://cdn.example.com/{n}.webm",
                duration_seconds=200,
            )
        return QueueItem(title=title, url=url, metadata=metadata)

    return _make


@pytest.fixture
def make_stream():
    from guild_jukebox.application.interfaces.stream_acquirer import AcquiredStream
    from guild_jukebox.domain.music.value_objects import StreamEncoding

    def _make(encoding=StreamEncoding.WEBM_OPUS, url: str = "https://www.youtube.com/watch?v=x"):
        return AcquiredStream(
            source="https://cdn.example.com/audio.webm",
            encoding=encoding,
            strategy="direct",
            url=url,
        )

    return _make


# ============================================================================
# Port Mocks
# ============================================================================


@pytest.fixture
def voice_adapter():
    """Voice adapter mock whose ``play`` hands out ids pb-1, pb-2, ..."""
    ids = (f"pb-{n}" for n in itertools.count(1))

    adapter = MagicMock()
    adapter.play = AsyncMock(side_effect=lambda *args, **kwargs: next(ids))
    adapter.stop = AsyncMock(return_value=True)
    adapter.pause = AsyncMock(return_value=True)
    adapter.resume = AsyncMock(return_value=True)
    adapter.disconnect = AsyncMock(return_value=True)
    adapter.ensure_connected = AsyncMock(return_value=True)
    adapter.set_volume = MagicMock(return_value=True)
    adapter.is_connected = MagicMock(return_value=True)
    adapter.is_active = MagicMock(return_value=True)
    adapter.get_current_channel_id = MagicMock(return_value=None)
    return adapter


@pytest.fixture
def input_resolver():
    resolver = MagicMock()
    resolver.resolve = AsyncMock()
    resolver.fetch_info = AsyncMock()
    resolver.search = AsyncMock(return_value=[])
    return resolver


@pytest.fixture
def stream_acquirer(make_stream):
    acquirer = MagicMock()
    acquirer.acquire = AsyncMock(side_effect=lambda info: make_stream())
    return acquirer


# ============================================================================
# Application Service Fixtures
# ============================================================================


@pytest.fixture
def playback_service(session_repository, voice_adapter, input_resolver, stream_acquirer, event_bus):
    from guild_jukebox.application.services.playback_service import PlaybackApplicationService

    return PlaybackApplicationService(
        session_repository=session_repository,
        voice_adapter=voice_adapter,
        input_resolver=input_resolver,
        stream_acquirer=stream_acquirer,
        event_bus=event_bus,
    )


@pytest.fixture
def settle(playback_service):
    """Awaits background loads scheduled by enqueue or skip."""

    async def _settle():
        while playback_service.pending:
            await asyncio.gather(*playback_service.pending)

    return _settle


@pytest.fixture
def queue_service(session_repository, input_resolver, playback_service):
    from guild_jukebox.application.services.queue_service import QueueApplicationService

    return QueueApplicationService(
        session_repository=session_repository,
        input_resolver=input_resolver,
        playback_service=playback_service,
        rng=random.Random(7),
    )


# ============================================================================
# Discord Fixtures
# ============================================================================


@pytest.fixture
def interaction():
    """Slash-command interaction from a member sitting in voice channel 333 of guild 111."""
    i = MagicMock(spec=discord.Interaction)
    i.response = MagicMock()
    i.response.is_done.return_value = False
    i.response.send_message = AsyncMock()
    i.response.defer = AsyncMock()
    i.followup = MagicMock()
    i.followup.send = AsyncMock()
    i.channel_id = 444

    i.guild = MagicMock()
    i.guild.id = 111

    member = MagicMock(spec=discord.Member)
    member.id = 222
    member.display_name = "TestUser"
    member.voice = MagicMock()
    member.voice.channel = MagicMock()
    member.voice.channel.id = 333
    member.voice.channel.name = "Lounge"
    i.user = member
    return i


@pytest.fixture
def mock_container(voice_adapter):
    container = MagicMock()
    container.voice_adapter = voice_adapter

    container.queue_service = MagicMock()
    container.queue_service.enqueue = AsyncMock()
    container.queue_service.get_queue = AsyncMock()
    container.queue_service.remove = AsyncMock()
    container.queue_service.clear = AsyncMock()
    container.queue_service.shuffle = AsyncMock()
    container.queue_service.toggle_loop = AsyncMock()
    container.queue_service.bind_text_channel = AsyncMock()

    container.playback_service = MagicMock()
    container.playback_service.skip = AsyncMock()
    container.playback_service.jump = AsyncMock()
    container.playback_service.pause = AsyncMock()
    container.playback_service.resume = AsyncMock()
    container.playback_service.stop = AsyncMock()
    container.playback_service.clear_all = AsyncMock()
    container.playback_service.leave = AsyncMock()
    container.playback_service.set_volume = AsyncMock()
    return container
