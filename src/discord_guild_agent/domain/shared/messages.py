"""Centralized message constants for error messages, log lines, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Configuration Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    INVALID_SETTINGS = "Invalid configuration:\n%s"

    # Media Resolution Errors
    SEARCH_BACKEND_FAILED = "Search failed for '{query}': {error}"
    EXTRACTION_FAILED = "Could not extract '{locator}': {error}"
    NO_STREAM_URL_FOR_LOCATOR = "No playable audio stream found for '{locator}'"
    SOURCE_CREATION_FAILED = "Could not open audio source: {error}"

    # Voice Errors
    GUILD_NOT_FOUND = "Guild {guild_id} is not available"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"
    VOICE_CONNECT_TIMEOUT = "Timed out joining voice channel {channel_id}"
    VOICE_NO_PERMISSION = "Missing permission to join voice channel {channel_id}"
    VOICE_CLIENT_ERROR = "Voice client error: {error}"
    SESSION_DESTROYED = "Playback session for guild {guild_id} was already destroyed"

    # Audit Errors
    LOG_CHANNEL_CREATE_FAILED = "Could not create log channel '{name}': {error}"
    LOG_CHANNEL_SEND_FAILED = "Could not write to log channel '{name}': {error}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_REUSED = "Reusing voice connection in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_DISCONNECT_FAILED = "Failed to disconnect voice in guild %s: %r"
    VOICE_LOST = "Bot left voice in guild %s, checking session"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # Session Lifecycle
    SESSION_ATTACHED = "Attached playback session %s in guild %s"
    SESSION_DESTROYED = "Destroyed playback session %s in guild %s"
    SESSION_DEAD_DROPPED = "Dropping dead playback session in guild %s"
    SESSION_TORN_DOWN = "Tore down guild %s (%s): cleared %s queued tracks"

    # Playback Operations
    TRACK_ENQUEUED = "Enqueued '%s' at position %s in guild %s"
    TRACK_STARTED = "Started playing '%s' in guild %s"
    TRACK_FINISHED = "Track finished: '%s' in guild %s"
    TRACK_SKIPPED = "Skipped '%s' in guild %s"
    TRACK_RESOLUTION_SKIPPED = "Skipping '%s' in guild %s: %s"
    PLAYER_START_FAILED = "Player failed to start '%s' in guild %s"
    STREAM_ENDED_WITH_ERROR = "Stream ended with error in guild %s: %r"
    STREAM_END_LOOP_CLOSED = "Event loop closed, dropping stream-end for guild %s"
    STALE_RESOLUTION_DISCARDED = "Discarding stale resolution of '%s' in guild %s"
    STALE_COMPLETION_IGNORED = "Ignoring stale stream-end in guild %s (generation %s)"
    STALE_ADVANCE_ABORTED = "Abandoning queue advance for guild %s (generation %s is stale)"
    COMPLETION_HANDLER_FAILED = "Error handling stream-end for guild %s"
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s (idle epoch %s)"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"

    # Idle Reclaim
    IDLE_RECLAIM_SCHEDULED = "Scheduling idle reclaim for guild %s in %ss (epoch %s)"
    IDLE_RECLAIMED = "Idle timeout reached, released voice in guild %s"
    IDLE_RECLAIM_SKIPPED = "Idle reclaim for guild %s is stale (epoch %s), ignoring"
    IDLE_RECLAIM_FAILED = "Idle reclaim failed for guild %s"

    # Media Resolution
    RESOLVER_NO_RESULTS = "No search results for %r"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_STREAM_OPENED = "Opened %s stream for %s"

    # Command Routing
    COMMAND_DISPATCHED = "Dispatching '%s' in guild %s"
    COMMAND_REJECTED = "Rejected '%s' in guild %s: %s"
    COMMAND_UNKNOWN = "Ignoring unknown command %r"

    # Audit Pipeline
    AUDIT_RECORDED = "Audit '%s' written for guild %s"
    AUDIT_SINK_UNAVAILABLE = "Dropping audit entry '%s' for guild %s: %s"
    AUDIT_CHANNEL_CREATED = "Created log channel '%s' in guild %s"
    AUDIT_CHANNEL_PREPARE_FAILED = "Could not prepare log channel in guild %s: %s"
    AUDIT_DISABLED = "Audit log disabled; skipping %s"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Guild Agent in {environment} mode"
    BOT_CONFIG_SUMMARY = (
        "Prefix '%s', audit channel '%s' (enabled=%s), idle disconnect after %ss"
    )
    FFMPEG_NOT_FOUND = "ffmpeg executable not found on PATH; voice playback will fail"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord channels.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Action Messages
    ACTION_QUEUED = "🎶 Queued: **{title}** (position {position})"
    ACTION_NOW_PLAYING = "▶️ Now playing: **{title}**"
    ACTION_SKIPPED = "⏭️ Skipped: **{title}**"
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."

    # State Messages
    STATE_NOW_PLAYING = "🎧 Now playing: **{title}**"
    STATE_NOW_PLAYING_WITH_DURATION = "🎧 Now playing: **{title}** [{duration}]"
    STATE_QUEUE_HEADER = "📋 Queue ({count} tracks):"
    STATE_QUEUE_LINE = "{position}. {title}"
    STATE_QUEUE_MORE = "…and {count} more"
    STATE_QUEUE_EMPTY = "Queue is empty."
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_NOTHING_TO_SKIP = "Nothing is playing, so there is nothing to skip."
    STATE_MUST_BE_IN_VOICE = "You must be in a voice channel to use this command!"
    STATE_SERVER_ONLY = "This command can only be used in a server."

    # Error Messages
    ERROR_QUERY_REQUIRED = "❌ Give me a link or something to search for."
    ERROR_TRACK_NOT_FOUND = "Couldn't find a track for: {query}"
    ERROR_LOOKUP_FAILED = "❌ Couldn't look that up right now. Try again later."
    ERROR_COULD_NOT_JOIN_VOICE = "I couldn't join your voice channel."
    ERROR_ALREADY_CONNECTED = "I'm already connected to voice in this server."
    ERROR_COMMAND_COOLDOWN = "⏳ Command on cooldown. Try again in {time_str}."
    ERROR_MISSING_PERMISSIONS = "❌ You don't have permission to use this command."
    ERROR_BOT_MISSING_PERMISSIONS = "❌ I need these permissions: {missing}"
    ERROR_COMMAND_FAILED_SEE_LOGS = "❌ Command failed. See logs."


class AuditMessages:
    """Titles and bodies written to the community log channel."""

    # Membership
    TITLE_MEMBER_JOINED = "Member Joined"
    BODY_MEMBER_JOINED = "{member} joined the server."
    TITLE_MEMBER_LEFT = "Member Left"
    BODY_MEMBER_LEFT = "{member} left the server."

    # Voice
    TITLE_VOICE_JOINED = "Joined Voice Channel"
    BODY_VOICE_JOINED = "{member} → {channel}"
    TITLE_VOICE_LEFT = "Left Voice Channel"
    BODY_VOICE_LEFT = "{member} ← {channel}"
    TITLE_VOICE_MOVED = "Switched Voice Channel"
    BODY_VOICE_MOVED = "{member} → {source} -> {target}"
    TITLE_SERVER_MUTE = "Server Mute Changed"
    BODY_SERVER_MUTE = "{member} server mute: {value}"
    TITLE_SERVER_DEAFEN = "Server Deafen Changed"
    BODY_SERVER_DEAFEN = "{member} server deafen: {value}"

    # Roles
    TITLE_ROLE_CREATED = "Role Created"
    BODY_ROLE_CREATED = "{role} was created."
    TITLE_ROLE_DELETED = "Role Deleted"
    BODY_ROLE_DELETED = "{role} was deleted."
    TITLE_ROLE_UPDATED = "Role Updated"
    BODY_ROLE_UPDATED = "{old} -> {new}"
    TITLE_ROLES_GRANTED = "Roles Added"
    BODY_ROLES_GRANTED = "{member} was given roles: {roles}"
    TITLE_ROLES_REVOKED = "Roles Removed"
    BODY_ROLES_REVOKED = "{member} lost roles: {roles}"

    # Messages
    TITLE_MESSAGE_DELETED = "Message Deleted"
    BODY_MESSAGE_DELETED = "User: {author}\nChannel: {channel}\nContent: {content}"
    TITLE_MESSAGE_EDITED = "Message Edited"
    BODY_MESSAGE_EDITED = "User: {author}\nChannel: {channel}\nOld: {old}\nNew: {new}"

    # Placeholders
    PLACEHOLDER_UNKNOWN = "Unknown"
    PLACEHOLDER_NO_CONTENT = "[no content or partial message]"
    PLACEHOLDER_NO_OLD_CONTENT = "[no previous content]"
    PLACEHOLDER_NO_NEW_CONTENT = "[no new content]"

    # Channel
    LOG_CHANNEL_CREATE_REASON = "Creating audit log channel."
