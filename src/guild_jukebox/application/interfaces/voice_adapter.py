"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from guild_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.events import PlaybackFinished
    from .stream_acquirer import AcquiredStream


class VoiceAdapter(ABC):
    """Interface for voice channel connection and the playback device."""

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> bool:
        """Connect to a voice channel."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    async def ensure_connected(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> bool:
        """Ensure bot is connected to the specified channel, connecting or moving as needed."""
        ...

    @abstractmethod
    async def play(self, guild_id: DiscordSnowflake, stream: "AcquiredStream", volume: float) -> str:
        """Create a resource for ``stream`` and attach it to the device.

        Returns:
            An identifier for the attached resource, echoed back in the
            ``PlaybackFinished`` event raised when it is released.

        Raises:
            DeviceError: When the device is missing or refuses the resource.
        """
        ...

    @abstractmethod
    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Release the current resource. The device then reports it finished."""
        ...

    @abstractmethod
    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def set_volume(self, guild_id: DiscordSnowflake, volume: float) -> bool:
        """Apply ``volume`` to the active resource; False when it has no gain stage."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def is_active(self, guild_id: DiscordSnowflake) -> bool:
        """True while a resource is attached (playing or paused)."""
        ...

    @abstractmethod
    def get_current_channel_id(self, guild_id: DiscordSnowflake) -> DiscordSnowflake | None:
        """Get the current voice channel ID, or None if not connected."""
        ...

    @abstractmethod
    def set_on_playback_finished(
        self,
        callback: Callable[["PlaybackFinished"], Awaitable[None]],
    ) -> None:
        """Set the callback invoked on the event loop when a resource is released."""
        ...
