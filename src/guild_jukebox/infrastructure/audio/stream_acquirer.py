"""StreamAcquirer implementation walking an ordered fallback chain of strategies."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from guild_jukebox.application.interfaces.stream_acquirer import AcquiredStream, StreamAcquirer
from guild_jukebox.domain.music.entities import UNKNOWN_TITLE
from guild_jukebox.domain.shared.exceptions import AllStrategiesFailedError
from guild_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from guild_jukebox.infrastructure.audio.strategies import StrategyResult, StreamStrategy

if TYPE_CHECKING:
    from ...application.interfaces.input_resolver import InputResolver
    from ...domain.music.entities import ResolvedMediaInfo

logger = logging.getLogger(__name__)

SEARCH_FALLBACK = "search"


class FallbackStreamAcquirer(StreamAcquirer):
    """Tries every strategy against every candidate URL, strategy-major.

    When the whole matrix fails and the item has a usable title, the title is
    searched and the same strategies run once more against the top hit.
    """

    def __init__(self, strategies: Sequence[StreamStrategy], resolver: InputResolver) -> None:
        self._strategies = tuple(strategies)
        self._resolver = resolver

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    async def _run_matrix(
        self, urls: list[str], info: ResolvedMediaInfo, attempts: list[StrategyResult]
    ) -> AcquiredStream | None:
        for strategy in self._strategies:
            for url in urls:
                result = await strategy.attempt(url, info)
                attempts.append(result)
                if result.stream is not None:
                    logger.info(
                        LogTemplates.ACQUIRE_SUCCEEDED,
                        strategy.name,
                        result.stream.encoding.value,
                        url,
                    )
                    return result.stream
                logger.debug(LogTemplates.ACQUIRE_ATTEMPT_FAILED, strategy.name, url, result.error)
        return None

    async def _search_fallback(
        self, info: ResolvedMediaInfo, attempts: list[StrategyResult]
    ) -> AcquiredStream | None:
        if not info.title or info.title == UNKNOWN_TITLE:
            attempts.append(StrategyResult.failed(SEARCH_FALLBACK, "", ErrorMessages.NO_TITLE_FOR_SEARCH))
            return None

        logger.info(LogTemplates.ACQUIRE_SEARCH_FALLBACK, info.title)
        try:
            hits = await self._resolver.search(info.title, limit=1)
        except Exception as e:
            attempts.append(StrategyResult.failed(SEARCH_FALLBACK, info.title, str(e)))
            return None
        if not hits:
            attempts.append(StrategyResult.failed(SEARCH_FALLBACK, info.title, ErrorMessages.NO_SEARCH_HIT))
            return None

        best = hits[0]
        return await self._run_matrix(best.candidate_urls(), best, attempts)

    async def acquire(self, info: ResolvedMediaInfo) -> AcquiredStream:
        urls = info.candidate_urls()
        logger.info(LogTemplates.ACQUIRE_CANDIDATES, info.title, len(urls))

        attempts: list[StrategyResult] = []
        stream = await self._run_matrix(urls, info, attempts)
        if stream is None:
            stream = await self._search_fallback(info, attempts)
        if stream is not None:
            return stream

        logger.warning(LogTemplates.ACQUIRE_EXHAUSTED, info.title, len(attempts))
        raise AllStrategiesFailedError(info.title, [(a.strategy, a.url) for a in attempts])
