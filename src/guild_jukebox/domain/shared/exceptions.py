"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


# === Resolution ===


class ResolutionError(DomainError):
    """Raised when user input cannot be turned into playable queue items.

    The caller's queue is left untouched.
    """

    def __init__(self, query: str, message: str | None = None, code: str | None = None) -> None:
        super().__init__(message or f"Could not resolve '{query}'", code=code or "RESOLUTION_FAILED")
        self.query = query


class EmptyPlaylistError(ResolutionError):
    def __init__(self, query: str) -> None:
        super().__init__(query, f"Playlist '{query}' has no playable entries", code="EMPTY_PLAYLIST")


class InfoUnavailableError(ResolutionError):
    def __init__(self, query: str, reason: str | None = None) -> None:
        msg = f"No media info available for '{query}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(query, msg, code="INFO_UNAVAILABLE")
        self.reason = reason


class NoResolvableCandidateError(ResolutionError):
    def __init__(self, query: str, candidates_tried: int = 0) -> None:
        super().__init__(
            query,
            f"None of {candidates_tried} search results for '{query}' could be resolved",
            code="NO_RESOLVABLE_CANDIDATE",
        )
        self.candidates_tried = candidates_tried


# === Acquisition ===


class AcquisitionError(DomainError):
    """Raised when no readable audio stream could be obtained for an item."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message, code=code or "ACQUISITION_FAILED")


class AllStrategiesFailedError(AcquisitionError):
    """Every strategy failed against every candidate URL."""

    def __init__(self, title: str, attempts: list[tuple[str, str]] | None = None) -> None:
        self.title = title
        self.attempts = list(attempts or [])
        super().__init__(
            f"All stream strategies failed for '{title}' ({len(self.attempts)} attempts)",
            code="ALL_STRATEGIES_FAILED",
        )


# === Commands / device ===


class CommandValidationError(DomainError):
    """Raised before any mutation when a command's preconditions are not met.

    ``message`` is user-facing and is sent back ephemerally.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code="COMMAND_REJECTED")


class DeviceError(DomainError):
    """Raised when the voice device faults while attaching or controlling a resource."""

    def __init__(self, guild_id: int, message: str) -> None:
        super().__init__(message, code="DEVICE_ERROR")
        self.guild_id = guild_id
