"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Audio (yt-dlp resolution, stream acquisition strategies, ffmpeg transcoding)
- Memory (the per-guild session registry)
- Discord (bot, cogs, voice adapter, notifier)
"""
