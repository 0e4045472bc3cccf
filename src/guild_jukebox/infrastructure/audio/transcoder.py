"""
FFmpeg Transcoder

Spawns the external decoder that turns a direct media locator into raw PCM
on stdout, and builds the option strings discord.py's FFmpeg sources use.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Final

from guild_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)
ffmpeg_logger = logging.getLogger(f"{__name__}.ffmpeg")

PCM_FORMAT: Final[str] = "s16le"
PCM_SAMPLE_RATE: Final[int] = 48_000
PCM_CHANNELS: Final[int] = 2


@dataclass(frozen=True)
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    executable: str = "ffmpeg"

    # Reconnection settings for streaming input
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    def input_args(self) -> list[str]:
        """Arguments placed before ``-i``."""
        args: list[str] = []
        if self.reconnect:
            args += ["-reconnect", "1"]
        if self.reconnect_streamed:
            args += ["-reconnect_streamed", "1"]
        if self.reconnect_delay_max:
            args += ["-reconnect_delay_max", str(self.reconnect_delay_max)]
        return args

    def get_before_options(self, headers: dict[str, str] | None = None) -> str:
        """Get FFmpeg before_options string for discord.py sources."""
        opts = " ".join(self.input_args())
        if headers:
            joined = "".join(f"{k}: {v}\r\n" for k, v in headers.items())
            opts = f'{opts} -headers "{joined}"'
        return opts

    def get_options(self) -> str:
        return "-vn"

    def pcm_command(self, locator: str, headers: dict[str, str] | None = None) -> list[str]:
        """Full argv for a transcoder emitting s16le / 48 kHz / stereo on stdout."""
        cmd = [self.executable, "-hide_banner", "-loglevel", "error", *self.input_args()]
        if headers:
            cmd += ["-headers", "".join(f"{k}: {v}\r\n" for k, v in headers.items())]
        cmd += [
            "-i", locator,
            "-vn",
            "-f", PCM_FORMAT,
            "-ar", str(PCM_SAMPLE_RATE),
            "-ac", str(PCM_CHANNELS),
            "pipe:1",
        ]
        return cmd


def _drain_stderr(pid: int, stream: IO[bytes]) -> None:
    """Forward every transcoder stderr line to the log until the pipe closes."""
    try:
        for raw in iter(stream.readline, b""):
            line = raw.decode("utf-8", errors="replace").rstrip()
            if line:
                ffmpeg_logger.warning(LogTemplates.TRANSCODER_STDERR, pid, line)
    except (OSError, ValueError):
        pass
    finally:
        stream.close()


def spawn_pcm_transcoder(
    locator: str,
    config: FFmpegConfig,
    headers: dict[str, str] | None = None,
) -> subprocess.Popen[bytes]:
    """Start ffmpeg reading ``locator`` and writing raw PCM to its stdout.

    The caller owns the returned process and must kill it when done.
    """
    process = subprocess.Popen(
        config.pcm_command(locator, headers),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    if process.stderr is not None:
        threading.Thread(
            target=_drain_stderr,
            args=(process.pid, process.stderr),
            name=f"ffmpeg-stderr-{process.pid}",
            daemon=True,
        ).start()
    logger.debug(LogTemplates.TRANSCODER_STARTED, process.pid, locator[:60])
    return process
