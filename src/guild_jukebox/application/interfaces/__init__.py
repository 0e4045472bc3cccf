"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from guild_jukebox.application.interfaces.input_resolver import InputResolver
from guild_jukebox.application.interfaces.stream_acquirer import AcquiredStream, StreamAcquirer
from guild_jukebox.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "AcquiredStream",
    "InputResolver",
    "StreamAcquirer",
    "VoiceAdapter",
]
