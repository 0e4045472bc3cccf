"""Stream acquisition strategies.

Each strategy turns one candidate URL into an ``AcquiredStream`` or reports
why it could not. Strategies never raise: anything the underlying library
throws becomes a failed ``StrategyResult``.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

from pytubefix import YouTube

from guild_jukebox.application.interfaces.stream_acquirer import AcquiredStream
from guild_jukebox.domain.music.value_objects import StreamEncoding, extract_video_id
from guild_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from guild_jukebox.infrastructure.audio.probe import StreamProbe, encoding_from_codec
from guild_jukebox.infrastructure.audio.transcoder import FFmpegConfig, spawn_pcm_transcoder

if TYPE_CHECKING:
    from ...application.interfaces.input_resolver import InputResolver
    from ...domain.music.entities import ResolvedMediaInfo

logger = logging.getLogger(__name__)

LOCATOR_FORMAT: Final[str] = "bestaudio/best"


@dataclass(frozen=True)
class StrategyResult:
    """Outcome of one strategy against one candidate URL."""

    strategy: str
    url: str
    stream: AcquiredStream | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.stream is not None

    @classmethod
    def ok(cls, strategy: str, url: str, stream: AcquiredStream) -> StrategyResult:
        return cls(strategy=strategy, url=url, stream=stream)

    @classmethod
    def failed(cls, strategy: str, url: str, error: str) -> StrategyResult:
        return cls(strategy=strategy, url=url, error=error)


class StreamStrategy(ABC):
    """One way of turning a media URL into a decodable byte stream."""

    name: str = "strategy"

    async def attempt(self, url: str, info: ResolvedMediaInfo) -> StrategyResult:
        try:
            stream = await self._acquire(url, info)
        except Exception as e:
            logger.debug(LogTemplates.ACQUIRE_ATTEMPT_FAILED, self.name, url, e, exc_info=True)
            return StrategyResult.failed(self.name, url, str(e) or type(e).__name__)
        if isinstance(stream, str):
            return StrategyResult.failed(self.name, url, stream)
        return StrategyResult.ok(self.name, url, stream)

    @abstractmethod
    async def _acquire(self, url: str, info: ResolvedMediaInfo) -> AcquiredStream | str:
        """Return the stream, or a short reason string when this URL is not usable."""
        ...


class DirectExtractionStrategy(StreamStrategy):
    """Use the extractor's own audio locator; on refusal fetch fresh info once."""

    name = "direct"

    def __init__(self, resolver: InputResolver, probe: StreamProbe) -> None:
        self._resolver = resolver
        self._probe = probe

    async def _open(self, url: str, info: ResolvedMediaInfo) -> AcquiredStream | None:
        if not info.stream_url:
            return None
        sniffed = await self._probe.sniff(info.stream_url, info.http_headers)
        if sniffed is None:
            return None
        encoding = sniffed
        if encoding is StreamEncoding.ARBITRARY:
            encoding = encoding_from_codec(info.acodec, info.ext)
        return AcquiredStream(
            source=info.stream_url,
            encoding=encoding,
            strategy=self.name,
            url=url,
            headers=dict(info.http_headers),
        )

    async def _acquire(self, url: str, info: ResolvedMediaInfo) -> AcquiredStream | str:
        candidates = info.candidate_urls()
        if candidates and url == candidates[0]:
            stream = await self._open(url, info)
            if stream is not None:
                return stream
            logger.debug(LogTemplates.ACQUIRE_FRESH_RETRY, url)

        fresh = await self._resolver.fetch_info(url)
        stream = await self._open(url, fresh)
        if stream is None:
            return ErrorMessages.NO_LOCATOR_IN_INFO
        return stream


class AlternateExtractorStrategy(StreamStrategy):
    """Ask pytubefix for the highest-bitrate audio-only stream and sniff it."""

    name = "pytubefix"

    def __init__(self, probe: StreamProbe) -> None:
        self._probe = probe

    @staticmethod
    def is_supported(url: str) -> bool:
        return extract_video_id(url) is not None

    @staticmethod
    def _best_audio_sync(url: str) -> Any:
        streams = YouTube(url).streams.filter(only_audio=True).order_by("abr").desc()
        return streams.first()

    async def _acquire(self, url: str, info: ResolvedMediaInfo) -> AcquiredStream | str:
        if not self.is_supported(url):
            return ErrorMessages.UNSUPPORTED_URL_SHAPE

        best = await asyncio.to_thread(self._best_audio_sync, url)
        if best is None or not getattr(best, "url", None):
            return ErrorMessages.NO_AUDIO_ONLY_STREAM

        encoding = await self._probe.sniff(best.url)
        if encoding is None:
            return ErrorMessages.NO_AUDIO_ONLY_STREAM
        return AcquiredStream(source=best.url, encoding=encoding, strategy=self.name, url=url)


class SubprocessTranscodeStrategy(StreamStrategy):
    """Resolve a direct locator with the yt-dlp CLI and pipe it through ffmpeg as raw PCM."""

    name = "subprocess"

    def __init__(
        self,
        ffmpeg: FFmpegConfig,
        *,
        ytdlp_executable: str = "yt-dlp",
        cookie: str | None = None,
        locator_timeout: float = 30.0,
        first_byte_timeout: float = 10.0,
    ) -> None:
        self._ffmpeg = ffmpeg
        self._ytdlp = ytdlp_executable
        self._cookie = cookie
        self._locator_timeout = locator_timeout
        self._first_byte_timeout = first_byte_timeout

    def locator_command(self, url: str) -> list[str]:
        cmd = [
            self._ytdlp,
            "--get-url",
            "--no-playlist",
            "--no-warnings",
            "--rm-cache-dir",
            "-f", LOCATOR_FORMAT,
        ]
        if self._cookie:
            cmd += ["--add-header", f"cookie: {self._cookie}"]
        cmd.append(url)
        return cmd

    async def resolve_locator(self, url: str) -> str:
        process = await asyncio.create_subprocess_exec(
            *self.locator_command(url),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self._locator_timeout)
        except TimeoutError:
            process.kill()
            await process.wait()
            raise RuntimeError(ErrorMessages.LOCATOR_TIMED_OUT.format(timeout=self._locator_timeout)) from None

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            status = ErrorMessages.LOCATOR_EXIT_STATUS.format(status=process.returncode)
            raise RuntimeError(f"{status}: {detail}" if detail else status)

        lines = stdout.decode("utf-8", errors="replace").strip().splitlines()
        return lines[0].strip() if lines else ""

    async def _acquire(self, url: str, info: ResolvedMediaInfo) -> AcquiredStream | str:
        direct = await self.resolve_locator(url)
        if not direct:
            return ErrorMessages.EMPTY_LOCATOR_OUTPUT

        process = spawn_pcm_transcoder(direct, self._ffmpeg)
        if process.stdout is None:
            process.kill()
            return ErrorMessages.TRANSCODER_NO_STDOUT
        stream = AcquiredStream(
            source=process.stdout,
            encoding=StreamEncoding.RAW,
            strategy=self.name,
            url=url,
            process=process,
        )

        try:
            first = await asyncio.wait_for(
                asyncio.to_thread(process.stdout.peek, 1), self._first_byte_timeout
            )
        except BaseException:
            stream.release()
            raise
        if not first:
            stream.release()
            return ErrorMessages.TRANSCODER_NO_STDOUT
        return stream
