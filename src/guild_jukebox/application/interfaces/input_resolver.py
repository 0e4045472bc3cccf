"""Port interface for turning user queries into queue items."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from guild_jukebox.domain.shared.types import NonEmptyStr, PositiveInt

if TYPE_CHECKING:
    from ...domain.music.entities import ResolvedInput, ResolvedMediaInfo


class InputResolver(ABC):
    """Interface for resolving URLs, playlist URLs and search text."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "ResolvedInput":
        """Resolve a query to one or more queue items.

        Raises:
            ResolutionError: When no playable item can be produced.
        """
        ...

    @abstractmethod
    async def fetch_info(self, url: NonEmptyStr) -> "ResolvedMediaInfo":
        """Fetch full media info for a single URL.

        Raises:
            InfoUnavailableError: When the extractor has no playable locator.
        """
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 1) -> list["ResolvedMediaInfo"]:
        """Return up to ``limit`` lightweight search hits in rank order."""
        ...

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...

    @abstractmethod
    def is_playlist(self, url: NonEmptyStr) -> bool:
        ...
