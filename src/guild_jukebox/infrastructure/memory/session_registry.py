"""Process-memory implementation of the session repository."""

from __future__ import annotations

import logging

from guild_jukebox.domain.music.entities import GuildSession
from guild_jukebox.domain.music.repository import SessionRepository
from guild_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class InMemorySessionRegistry(SessionRepository):
    """Guild-keyed session map with lazy creation and no eviction."""

    def __init__(self, default_volume: float = 1.0) -> None:
        self._sessions: dict[int, GuildSession] = {}
        self._default_volume = default_volume

    async def get(self, guild_id: int) -> GuildSession | None:
        return self._sessions.get(guild_id)

    async def get_or_create(self, guild_id: int) -> GuildSession:
        session = self._sessions.get(guild_id)
        if session is None:
            session = GuildSession(guild_id=guild_id, volume=self._default_volume)
            self._sessions[guild_id] = session
            logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return session

    async def all(self) -> list[GuildSession]:
        return list(self._sessions.values())
