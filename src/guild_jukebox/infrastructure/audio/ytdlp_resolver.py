"""InputResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final

from yt_dlp import YoutubeDL

from guild_jukebox.application.interfaces.input_resolver import InputResolver
from guild_jukebox.config.settings import AudioSettings
from guild_jukebox.domain.music.entities import (
    UNKNOWN_TITLE,
    QueueItem,
    ResolvedInput,
    ResolvedMediaInfo,
)
from guild_jukebox.domain.music.value_objects import InputKind
from guild_jukebox.domain.shared.exceptions import (
    EmptyPlaylistError,
    InfoUnavailableError,
    NoResolvableCandidateError,
)
from guild_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from guild_jukebox.infrastructure.audio.models import YtDlpMediaInfo, YtDlpOpts, YtDlpPlaylist

logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_MAX: Final[int] = 100
LOG_URL_TRUNCATE: Final[int] = 60

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://"),
    re.compile(r"^www\."),
]

PLAYLIST_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"[?&]list="),
    re.compile(r"/playlist\?"),
    re.compile(r"/sets/"),
]


class YtDlpResolver(InputResolver):
    """Classifies queries and resolves them with an in-process YoutubeDL."""

    def __init__(
        self,
        settings: AudioSettings | None = None,
        *,
        playlist_max: int = DEFAULT_PLAYLIST_MAX,
        cookie: str | None = None,
    ) -> None:
        self._settings = settings or AudioSettings()
        self._playlist_max = playlist_max
        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            http_headers={"Cookie": cookie} if cookie else None,
        )

    @property
    def playlist_max(self) -> int:
        return self._playlist_max

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _extract(self, target: str, opts: YtDlpOpts) -> dict[str, Any] | None:
        with YoutubeDL(params=opts.to_params()) as ydl:
            data = ydl.extract_info(target, download=False)
        return dict(data) if isinstance(data, dict) else None

    # ── sync workers (run via asyncio.to_thread) ──────────────────────

    def _extract_info_sync(self, url: str) -> ResolvedMediaInfo:
        try:
            data = self._extract(url, self._get_opts())
        except Exception as e:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url[:LOG_URL_TRUNCATE])
            raise InfoUnavailableError(url, str(e)) from e

        if data is None:
            raise InfoUnavailableError(url, ErrorMessages.EXTRACTOR_RETURNED_NONE)

        info = YtDlpMediaInfo.model_validate(data)
        if not info.page_url and not info.url:
            raise InfoUnavailableError(url, ErrorMessages.NO_LOCATOR_IN_INFO)
        return info.to_media_info(original_url=url)

    def _search_sync(self, query: str, limit: int) -> list[YtDlpMediaInfo]:
        try:
            data = self._extract(f"ytsearch{limit}:{query}", self._get_opts(extract_flat=True))
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return []
        if data is None:
            return []
        return YtDlpPlaylist.model_validate(data).entries[:limit]

    def _extract_playlist_sync(self, url: str) -> YtDlpPlaylist:
        try:
            data = self._extract(url, self._get_opts(noplaylist=False, extract_flat="in_playlist"))
        except Exception as e:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_PLAYLIST, url[:LOG_URL_TRUNCATE])
            raise EmptyPlaylistError(url) from e
        if data is None:
            raise EmptyPlaylistError(url)
        return YtDlpPlaylist.model_validate(data)

    # ── InputResolver ─────────────────────────────────────────────────

    async def resolve(self, query: str) -> ResolvedInput:
        query = query.strip()
        if self.is_url(query) and self.is_playlist(query):
            logger.debug(LogTemplates.RESOLVE_CLASSIFIED, query, "playlist")
            return await self._resolve_playlist(query)
        if self.is_url(query):
            logger.debug(LogTemplates.RESOLVE_CLASSIFIED, query, "single")
            info = await self.fetch_info(query)
            return ResolvedInput(kind=InputKind.SINGLE, items=[QueueItem.from_info(info)], total_available=1)
        logger.debug(LogTemplates.RESOLVE_CLASSIFIED, query, "search")
        return await self._resolve_search(query)

    async def _resolve_playlist(self, url: str) -> ResolvedInput:
        playlist = await asyncio.to_thread(self._extract_playlist_sync, url)
        entries = [e for e in playlist.entries if e.page_url]
        if not entries:
            raise EmptyPlaylistError(url)

        kept = entries[: self._playlist_max]
        logger.info(LogTemplates.RESOLVE_PLAYLIST, playlist.title, len(entries), len(kept))
        items = [
            QueueItem(title=entry.title or UNKNOWN_TITLE, url=entry.page_url or url)
            for entry in kept
        ]
        return ResolvedInput(
            kind=InputKind.PLAYLIST,
            title=playlist.title,
            items=items,
            total_available=len(entries),
        )

    async def _resolve_search(self, query: str) -> ResolvedInput:
        candidates = await self.search(query, self._settings.search_candidates)
        for rank, candidate in enumerate(candidates):
            url = candidate.original_url or candidate.webpage_url
            if not url:
                continue
            try:
                info = await self.fetch_info(url)
            except InfoUnavailableError as e:
                logger.info(LogTemplates.RESOLVE_CANDIDATE_FAILED, rank, query, e.message)
                continue
            title = info.title if info.title != UNKNOWN_TITLE else candidate.title
            return ResolvedInput(
                kind=InputKind.SINGLE,
                items=[QueueItem(title=title, url=info.webpage_url or url, metadata=info)],
                total_available=1,
            )
        raise NoResolvableCandidateError(query, len(candidates))

    async def fetch_info(self, url: str) -> ResolvedMediaInfo:
        return await asyncio.to_thread(self._extract_info_sync, url)

    async def search(self, query: str, limit: int = 1) -> list[ResolvedMediaInfo]:
        entries = await asyncio.to_thread(self._search_sync, query, limit)
        return [e.to_media_info(original_url=e.page_url, flat=True) for e in entries if e.page_url]

    def is_url(self, query: str) -> bool:
        return any(pattern.search(query) for pattern in URL_PATTERNS)

    def is_playlist(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in PLAYLIST_PATTERNS)
