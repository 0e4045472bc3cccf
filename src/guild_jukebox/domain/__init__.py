"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: exceptions, message catalogues, constrained types and the event bus
- music/: queue items, guild sessions, playback states and their events
"""

from guild_jukebox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
