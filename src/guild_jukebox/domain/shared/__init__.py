"""
Shared Domain Kernel

Contains exceptions, constrained types and the event bus shared across the domain.
"""

from guild_jukebox.domain.shared.events import DomainEvent, EventBus, get_event_bus
from guild_jukebox.domain.shared.exceptions import (
    AcquisitionError,
    AllStrategiesFailedError,
    CommandValidationError,
    DeviceError,
    DomainError,
    EmptyPlaylistError,
    InfoUnavailableError,
    InvalidOperationError,
    NoResolvableCandidateError,
    ResolutionError,
)

__all__ = [
    "DomainEvent",
    "EventBus",
    "get_event_bus",
    "DomainError",
    "InvalidOperationError",
    "ResolutionError",
    "EmptyPlaylistError",
    "InfoUnavailableError",
    "NoResolvableCandidateError",
    "AcquisitionError",
    "AllStrategiesFailedError",
    "CommandValidationError",
    "DeviceError",
]
