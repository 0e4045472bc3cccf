"""Audio infrastructure - yt-dlp resolver, stream acquisition chain and ffmpeg transcoding."""

from guild_jukebox.infrastructure.audio.models import YtDlpMediaInfo, YtDlpOpts, YtDlpPlaylist
from guild_jukebox.infrastructure.audio.probe import StreamProbe, sniff_encoding
from guild_jukebox.infrastructure.audio.strategies import (
    AlternateExtractorStrategy,
    DirectExtractionStrategy,
    StrategyResult,
    StreamStrategy,
    SubprocessTranscodeStrategy,
)
from guild_jukebox.infrastructure.audio.stream_acquirer import FallbackStreamAcquirer
from guild_jukebox.infrastructure.audio.transcoder import FFmpegConfig, spawn_pcm_transcoder
from guild_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "AlternateExtractorStrategy",
    "DirectExtractionStrategy",
    "FFmpegConfig",
    "FallbackStreamAcquirer",
    "StrategyResult",
    "StreamProbe",
    "StreamStrategy",
    "SubprocessTranscodeStrategy",
    "YtDlpMediaInfo",
    "YtDlpOpts",
    "YtDlpPlaylist",
    "YtDlpResolver",
    "sniff_encoding",
    "spawn_pcm_transcoder",
]
