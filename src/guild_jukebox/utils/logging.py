"""Colored logging formatter and library log-level defaults."""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Final

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless the app runs at DEBUG.
NOISY_LOGGERS: Final[tuple[str, ...]] = (
    "discord.gateway",
    "discord.voice_state",
    "discord.player",
    "httpx",
    "httpcore",
)


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colors the levelname field.

    Colors are disabled when ``NO_COLOR`` is set or when the stream is not a
    TTY, so redirected output stays plain.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str | None = DEFAULT_FORMAT,
        datefmt: str | None = DATE_FORMAT,
        *,
        stream: IO[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._stream = stream

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stdout
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self._use_color():
            color = self.COLORS.get(record.levelno, "")
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def quiet_libraries(level: int) -> None:
    """Raise noisy library loggers to WARNING unless ``level`` is DEBUG."""
    target = level if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(target)
