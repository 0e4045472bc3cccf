"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for session storage.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from guild_jukebox.domain.music.entities import GuildSession


class SessionRepository(ABC):
    """Abstract registry of per-guild sessions.

    Sessions are created lazily on first access and live for the lifetime
    of the process.
    """

    @abstractmethod
    async def get(self, guild_id: int) -> GuildSession | None:
        """Retrieve a session by guild ID.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The session if found, None otherwise.
        """
        ...

    @abstractmethod
    async def get_or_create(self, guild_id: int) -> GuildSession:
        """Get an existing session or create a new one.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The existing or newly created session.
        """
        ...

    @abstractmethod
    async def all(self) -> list[GuildSession]:
        """Every session created so far."""
        ...
