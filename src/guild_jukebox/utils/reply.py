"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache

QUEUE_VIEW_LINES = 15


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "–"

    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_link(title: str, url: str | None, max_length: int = 90) -> str:
    """Markdown link when ``url`` is a web URL, bold title otherwise."""
    shown = truncate(title, max_length)
    if url and url.startswith(("http://", "https://")):
        return f"[{shown}]({url})"
    return f"**{shown}**"


def format_queue_lines(titles: list[str], limit: int = QUEUE_VIEW_LINES) -> tuple[list[str], int]:
    """Numbered lines for the first ``limit`` upcoming titles plus how many were left out.

    Numbering starts at 1 to match the positions accepted by jump and remove.
    """
    lines = [f"`{idx}.` {truncate(title, 70)}" for idx, title in enumerate(titles[:limit], start=1)]
    return lines, max(0, len(titles) - limit)
