"""Port interface for acquiring a decodable audio stream for one media item."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING

from guild_jukebox.domain.music.value_objects import StreamEncoding
from guild_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import ResolvedMediaInfo

logger = logging.getLogger(__name__)

PROCESS_KILL_TIMEOUT: float = 1.0


@dataclass
class AcquiredStream:
    """A live audio stream plus the tag describing how to decode it.

    ``source`` is either a readable pipe (raw PCM from a transcoder we own)
    or a direct media locator that the playback device opens itself.
    """

    source: str | IO[bytes]
    encoding: StreamEncoding
    strategy: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    process: subprocess.Popen[bytes] | None = None

    @property
    def is_pipe(self) -> bool:
        return not isinstance(self.source, str)

    def release(self) -> None:
        """Kill the transcoder backing this stream, if any. Safe to call twice."""
        process, self.process = self.process, None
        if process is None:
            return
        try:
            if process.poll() is None:
                process.kill()
                process.wait(timeout=PROCESS_KILL_TIMEOUT)
                logger.debug(LogTemplates.TRANSCODER_KILLED, process.pid)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(LogTemplates.TRANSCODER_CLEANUP_ERROR, e)


class StreamAcquirer(ABC):
    """Interface for turning resolved media info into a playable stream."""

    @abstractmethod
    async def acquire(self, info: "ResolvedMediaInfo") -> AcquiredStream:
        """Return the first stream any strategy can produce.

        Raises:
            AllStrategiesFailedError: Only after every strategy failed for every candidate.
        """
        ...
