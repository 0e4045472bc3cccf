"""Byte-level container sniffing for direct media locators."""

from __future__ import annotations

import logging
from typing import Final

import httpx

from guild_jukebox.domain.music.value_objects import StreamEncoding
from guild_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

SNIFF_BYTES: Final[int] = 4096
OGG_MAGIC: Final[bytes] = b"OggS"
OPUS_HEAD: Final[bytes] = b"OpusHead"
EBML_MAGIC: Final[bytes] = b"\x1a\x45\xdf\xa3"
WEBM_OPUS_CODEC: Final[bytes] = b"A_OPUS"


def sniff_encoding(head: bytes) -> StreamEncoding:
    """Classify the first bytes of a stream.

    Only Opus in Ogg or WebM is recognised; everything else has to be
    decoded by ffmpeg and is reported as ARBITRARY.
    """
    if head.startswith(OGG_MAGIC) and OPUS_HEAD in head:
        return StreamEncoding.OGG_OPUS
    if head.startswith(EBML_MAGIC) and WEBM_OPUS_CODEC in head:
        return StreamEncoding.WEBM_OPUS
    return StreamEncoding.ARBITRARY


def encoding_from_codec(acodec: str | None, ext: str | None) -> StreamEncoding:
    """Best guess from extractor metadata when no bytes were read."""
    if acodec and acodec.lower().startswith("opus"):
        if ext == "webm":
            return StreamEncoding.WEBM_OPUS
        if ext in {"ogg", "opus"}:
            return StreamEncoding.OGG_OPUS
    return StreamEncoding.ARBITRARY


class StreamProbe:
    """Reads the head of a remote stream to confirm it is live and sniff its container."""

    def __init__(self, timeout: float = 10.0, cookie: str | None = None) -> None:
        self._timeout = timeout
        self._cookie = cookie

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = dict(extra or {})
        headers["Range"] = f"bytes=0-{SNIFF_BYTES - 1}"
        if self._cookie and not any(k.lower() == "cookie" for k in headers):
            headers["Cookie"] = self._cookie
        return headers

    async def read_head(self, locator: str, headers: dict[str, str] | None = None) -> bytes:
        """Return up to ``SNIFF_BYTES`` from the start of ``locator``.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status.
        """
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            async with client.stream("GET", locator, headers=self._headers(headers)) as response:
                response.raise_for_status()
                head = b""
                async for chunk in response.aiter_bytes():
                    head += chunk
                    if len(head) >= SNIFF_BYTES:
                        break
                return head[:SNIFF_BYTES]

    async def sniff(self, locator: str, headers: dict[str, str] | None = None) -> StreamEncoding | None:
        """Encoding of a readable, non-empty stream, or None when nothing came back."""
        try:
            head = await self.read_head(locator, headers)
        except httpx.HTTPError as e:
            logger.debug(LogTemplates.PROBE_FAILED, locator[:60], e)
            return None
        if not head:
            return None
        encoding = sniff_encoding(head)
        logger.debug(LogTemplates.PROBE_SNIFFED, encoding.value, locator[:60])
        return encoding
