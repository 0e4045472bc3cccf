"""Centralized message constants for error messages, log lines, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Settings Validation
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Audio/Stream
    NO_LOCATOR_IN_INFO = "no playable locator in extractor response"
    EXTRACTOR_RETURNED_NONE = "extractor returned nothing"
    UNSUPPORTED_URL_SHAPE = "URL is not a supported watch URL"
    NO_AUDIO_ONLY_STREAM = "no audio-only stream offered"
    EMPTY_LOCATOR_OUTPUT = "locator tool printed no URL"
    LOCATOR_EXIT_STATUS = "locator tool exited with status {status}"
    LOCATOR_TIMED_OUT = "locator tool timed out after {timeout}s"
    TRANSCODER_NO_STDOUT = "transcoder produced no output pipe"
    NO_TITLE_FOR_SEARCH = "no title known for search fallback"
    NO_SEARCH_HIT = "search returned no hit"

    # Device
    NOT_CONNECTED = "Not connected to voice in guild {guild_id}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    so formatting is deferred until the record is emitted.
    """

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_ADAPTER_FAILED = "Voice adapter failed to play in guild %s"
    VOICE_MOVE_TIMEOUT = "Timeout moving to channel %s"
    VOICE_STALE_CLEANUP = "Stale voice client in guild %s, cleaning up"
    VOICE_SELF_DEAFEN_FAILED = "Could not self-deafen in guild %s: %s"
    VOICE_CONNECT_FAILED = "Failed to connect to voice channel %s"
    VOICE_MOVE_FAILED = "Failed to move to voice channel %s"
    VOICE_DISCONNECT_FAILED = "Failed to disconnect from voice in guild %s"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # Playback Driver
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_LOADING = "Loading '%s' in guild %s"
    PLAYBACK_ALREADY_LOADING = "Playback already loading in guild %s, ignoring start"
    PLAYBACK_HEAD_CHANGED = "Head changed while loading '%s' in guild %s, reconciling"
    PLAYBACK_ITEM_SKIPPED = "Skipping '%s' in guild %s after failure: %s"
    PLAYBACK_RETRY_BUDGET_SPENT = "Failure-skip budget spent in guild %s with %d items left"
    PLAYBACK_FINISHED = "Playback finished in guild %s (error: %s)"
    PLAYBACK_DEVICE_ERROR = "Device reported an error in guild %s: %s"
    PLAYBACK_CALLBACK_ERROR = "Error in playback-finished callback for guild %s: %s"
    PLAYBACK_VOLUME_LIVE = "Applied volume %.2f to active resource in guild %s"
    PLAYBACK_VOLUME_DEFERRED = "Volume %.2f stored for next resource in guild %s"
    PLAYBACK_ATTACHED = "Attached %s resource %s in guild %s"
    PLAYBACK_STALE_EVENT = "Ignoring finish event for detached resource %s in guild %s"
    PLAYBACK_NO_CALLBACK = "No playback-finished callback set for guild %s"
    PLAYBACK_TASK_FAILED = "Background playback task %s failed"
    PLAYBACK_TASKS_CANCELLED = "Cancelled %d pending playback task(s)"

    # Queue Operations
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s"
    QUEUE_ENQUEUED = "Enqueued %d item(s) in guild %s (queue length %d)"
    QUEUE_JUMPED = "Moved '%s' from position %d to next in guild %s"
    QUEUE_REMOVED = "Removed '%s' from queue in guild %s"
    QUEUE_CLEARED = "Cleared %d upcoming items in guild %s"
    QUEUE_CLEARED_ALL = "Cleared all %d items in guild %s"
    QUEUE_SHUFFLED = "Shuffled queue in guild %s"
    QUEUE_RECYCLED = "Recycled '%s' to the tail in guild %s"
    LOOP_TOGGLED = "Loop %s in guild %s"

    # Session Registry
    SESSION_CREATED = "Created session for guild %s"

    # Resolution
    RESOLVE_CLASSIFIED = "Classified %r as %s"
    RESOLVE_PLAYLIST = "Playlist '%s' has %d entries, keeping %d"
    RESOLVE_CANDIDATE_FAILED = "Search candidate %s for %r failed: %s"
    RESOLVE_FAILED = "Resolution failed for %r: %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_EXTRACT_PLAYLIST = "Failed to extract playlist from %s"

    # Acquisition
    ACQUIRE_CANDIDATES = "Acquiring '%s' from %d candidate URL(s)"
    ACQUIRE_ATTEMPT_FAILED = "Strategy %s failed for %s: %s"
    ACQUIRE_SUCCEEDED = "Strategy %s produced %s stream for %s"
    ACQUIRE_FRESH_RETRY = "Retrying %s with fresh info"
    ACQUIRE_SEARCH_FALLBACK = "Falling back to title search for '%s'"
    ACQUIRE_EXHAUSTED = "All strategies failed for '%s' after %d attempts"
    PROBE_SNIFFED = "Sniffed %s container from %s"
    PROBE_FAILED = "Could not sniff stream header from %s: %s"
    TRANSCODER_STARTED = "Transcoder started (pid=%s) for %s"
    TRANSCODER_STDERR = "ffmpeg[%s]: %s"
    TRANSCODER_KILLED = "Killed transcoder pid=%s"
    TRANSCODER_CLEANUP_ERROR = "Error cleaning up transcoder: %s"

    # Notifications
    NOTIFY_SEND_FAILED = "Failed to send notification to channel %s: %s"
    NOTIFIER_STARTED = "Playback notifier subscribed to events"
    NOTIFIER_STOPPED = "Playback notifier unsubscribed"

    # Application Lifecycle
    BOT_STARTING = "Starting guild jukebox in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_CONTAINER_SHUTDOWN = "Container shut down"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %s"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_VOICE_CLEANUP_ERROR = "Error disconnecting voice in guild %s: %s"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Bot Command Sync
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_ON_STARTUP_FAILED = "Failed to sync commands on startup: %s"

    # Bot Error Handling
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    Keep them concise and friendly.
    """

    # Success / Action
    ACTION_JOINED = "🔊 Joined **{channel}**."
    ACTION_SKIPPED = "⏭️ Skipped."
    ACTION_JUMPED = "⏩ Jumped to **{title}**."
    ACTION_TRACK_REMOVED = "🗑️ Removed: **{title}**"
    ACTION_QUEUE_CLEARED = "🗑️ Cleared {count} upcoming items."
    ACTION_QUEUE_CLEARED_ALL = "🗑️ Cleared the queue and stopped playback."
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_SHUFFLED = "🔀 Shuffled the queue."
    ACTION_LOOP_ON = "🔁 Loop enabled."
    ACTION_LOOP_OFF = "➡️ Loop disabled."
    ACTION_VOLUME_SET = "🔊 Volume set to {percent}%."
    ACTION_DISCONNECTED = "👋 Disconnected from voice channel."
    ACTION_ENQUEUED = "➕ Queued **{title}** (position {position})."
    ACTION_LOADING = "⏳ Loading **{title}**..."
    ACTION_QUEUED = "➕ Queued **{title}**."
    ACTION_PLAYLIST_ENQUEUED = "➕ Queued {added} items from **{title}**."
    ACTION_PLAYLIST_TRUNCATED = "➕ Queued {added} of {total} items from **{title}**."

    # Notifications
    NOTIFY_SKIPPED_ON_FAILURE = "⚠️ Skipped **{title}**: could not play it."
    NOTIFY_QUEUE_FINISHED = "✅ Queue finished."

    # Errors / rejections
    ERROR_COMMAND_FAILED_SEE_LOGS = "❌ Command failed. See logs."
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_NOTHING_FOUND = "❌ Nothing playable found for: {query}"
    ERROR_INVALID_POSITION = "❌ Position must be between 1 and {upper}."
    ERROR_NO_UPCOMING = "❌ There are no upcoming items."

    # State / guards
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_NOTHING_TO_PAUSE = "Nothing is playing, so there is nothing to pause."
    STATE_NOTHING_PAUSED = "Nothing is paused."
    STATE_QUEUE_EMPTY = "Queue is empty."
    STATE_NOTHING_TO_CLEAR = "There is nothing queued after the current item."
    STATE_NOT_ENOUGH_TO_SHUFFLE = "Need at least two upcoming items to shuffle."
    STATE_NOT_CONNECTED_TO_VOICE = "Not connected to a voice channel."
    STATE_MUST_BE_IN_VOICE = "You must be in a voice channel to use this command!"
    STATE_WRONG_VOICE_CHANNEL = "You must be in my voice channel (**{channel}**) to use this command."
    STATE_SERVER_ONLY = "This command can only be used in a server."

    # Embeds
    EMBED_NOW_PLAYING = "🎵 Now Playing"
    EMBED_QUEUE = "📋 Queue ({total} items)"
    EMBED_QUEUE_UP_NEXT = "Up next"
    EMBED_QUEUE_MORE = "...and {count} more"
    EMBED_PLAYLIST_PREVIEW = "First items"
    EMBED_LOOP = "Loop"
    EMBED_VOLUME = "Volume"
    EMBED_DURATION = "Duration"
    LOOP_ON = "on"
    LOOP_OFF = "off"
