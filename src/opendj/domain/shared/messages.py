"""Centralized message constants for error messages, log templates, and chat replies."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Voting
    INVALID_THRESHOLD = "Threshold must be at least 1"

    # Resolution
    RESOLVER_NO_INFO = "resolver returned no information"
    RESOLVER_NO_DURATION = "media has no known duration"
    RESOLVER_NO_STREAM = "no playable stream found"

    # Playback
    RENDERER_NOT_STARTED = "renderer process could not be started: {error}"
    RENDERER_EXIT_CODE = "renderer exited with code {code}"

    # Settings
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_CHAT_ADDRESS = "Chat address must start with ws:// or wss://"
    CHAT_TOKEN_REQUIRED = "CHAT__AUTH_TOKEN environment variable is required"

    # Chat
    UNPARSEABLE_FRAME = "couldn't parse message type"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Application lifecycle
    APP_STARTING = "Starting opendj (environment=%s)"
    APP_STOPPED = "opendj stopped"
    APP_KEYBOARD_INTERRUPT = "Interrupted, shutting down"
    APP_FATAL_ERROR = "Fatal error: %s"

    # Database lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Request store
    QUEUE_ADDED = "➕ adding '%s' for %s"
    QUEUE_REPLACED = "♻️ changing %s's song to '%s'"
    QUEUE_REMOVED = "🗑️ removed %s's song '%s' at index %d"
    QUEUE_DEDICATED = "💌 %s dedicated their song to %s"
    QUEUE_RESTORED = "Loaded playlist with %d songs"
    QUEUE_SAVE_FAILED = "Failed to save queue snapshot: %s"
    QUEUE_LOAD_FAILED = "Failed to load queue snapshot: %s"
    QUEUE_ROW_SKIPPED = "Skipping unreadable queue row at position %s: %s"
    SUBSCRIBERS_RESTORED = "Loaded subscriber list with %d entries"
    SUBSCRIBERS_SAVE_FAILED = "Failed to save subscriber list: %s"
    SUBSCRIBERS_LOAD_FAILED = "Failed to load subscriber list: %s"

    # Scheduler
    SCHEDULER_STARTED = "Playback scheduler started"
    SCHEDULER_STOPPED = "Playback scheduler stopped"
    SCHEDULER_IDLE = "Queue empty, retrying in %.1fs"
    SCHEDULER_LOOP_ERROR = "Unexpected error in playback loop, recovering"
    TRACK_STARTED = "▶ Now Playing %s's request: %s"
    TRACK_FINISHED = "🛑 Done playing '%s' (%s)"
    TRACK_SKIPPED = "⏭️ Skipping '%s' (%s)"
    PLAYBACK_RESOLVE_FAILED = "Couldn't get stream for '%s': %s"
    PLAYBACK_FAILED = "Renderer aborted or errored on '%s': %s"
    SKIP_IGNORED_IDLE = "Skip requested while idle, ignoring"

    # Voting / likes
    VOTE_CAST = "%s voted to skip (%d/%d)"
    VOTE_PASSED = "Skip vote passed with %d/%d votes"
    LIKE_CAST = "💖 %s liked %s's song"
    BACKUP_REMEMBERED = "Remembered '%s' for the backup rotation (%d likes)"

    # Event bus
    EVENT_SUBSCRIBED = "Subscribed handler to: %s"
    EVENT_PUBLISHING = "Publishing %s to %d handlers"
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"

    # Resolver / renderer
    RESOLVING = "Resolving %s"
    RESOLVED = "Resolved %s -> '%s' (%.0fs)"
    RENDERER_STARTING = "Starting renderer for '%s'"
    RENDERER_CANCELLED = "Renderer cancelled for '%s'"
    RENDERER_KILL_FAILED = "Encountered an error while trying to stop the renderer: %s"

    # Chat / messaging
    CHAT_CONNECTING = "🌐 trying to establish connection"
    CHAT_CONNECTED = "✔️ Connection established."
    CHAT_ERROR = "Chat connection error: %s"
    CHAT_SERVER_ERROR = "Chat error: %s"
    CHAT_PARSE_FAILED = "Parsing message failed: %s"
    CHAT_COMMAND_FAILED = "Command %s from %s failed"
    MESSAGE_SENDING = "[MSG] sending message to %s: '%s'"
    MESSAGE_SEND_FAILED = "Failed to send message to %s: %s"
    OUTBOX_FULL = "Outbox full, waiting to enqueue message for %s"

    # Publishing
    PLAYLIST_PUBLISHED = "📝 Generated playlist at %s"
    PLAYLIST_UPLOAD_FAILED = "Failed to upload playlist: %s"


class ReplyMessages:
    """User-facing chat replies."""

    # PLAYING / NEXT
    NOTHING_PLAYING = "Nothing is playing right now"
    PLAYING = (
        "`{bar}` `{elapsed}/{total}` currently playing: 🎶 \"{title}\" 🎶 "
        "requested by {owner}{dedication} {locator}"
    )
    PLAYING_DEDICATION = " - dedicated to {target} -"
    NO_SONG_QUEUED = "No song queued"
    UP_NEXT = "up next: '{title}' requested by {owner}{dedication}"
    UP_NEXT_DEDICATION = " and dedicated to {target}"

    # QUEUE
    QUEUE_LENGTH = "There are currently {count} songs in the queue"
    QUEUE_POSITION = ", you are at position {position}"
    QUEUE_WAIT = " and your song will play in {wait}"
    QUEUE_YOURS_PLAYING = ", your song is playing right now"

    # PLAYLIST
    PLAYLIST_LINK = "you can find the current playlist here: {url}"
    GENERIC_ERROR = "there was an error"

    # SUBSCRIBE_TOGGLE
    SUBSCRIBED = (
        "You will now get a message every time a new song plays. "
        "send `-updateme` again to turn it off."
    )
    UNSUBSCRIBED = "You will no longer get notifications."

    # LIKE
    LIKE_ACK = "I will tell {owner} you like their song PeepoHappy"

    # DEDICATE
    DEDICATION_EMPTY = "Tell me who to dedicate your song to, e.g. `-dedicate somebody`"
    NOT_QUEUED = "You don't have a song in the queue."
    DEDICATED = "Dedicated your song to {target}"
    DEDICATION_INVALID = "That is not a valid name to dedicate to"

    # REMOVE
    NOT_ALLOWED_TO_REMOVE = "You can only remove your own song unless you're a mod"
    INVALID_INTEGER = "please enter a valid integer"
    INDEX_OUT_OF_RANGE = "index out of range"
    REMOVED = "Successfully removed"

    # SUBMIT
    INVALID_URL = "invalid url"
    TOO_LONG = "This song is too long, please keep it under {minutes} minutes"
    OVER_CAP = "You already have {queued} of music queued, the limit is {limit}"
    ADDED = "Added your request to the queue. {position}"
    REPLACED = "Replaced your previous selection. {position}"
    INVALID_REQUESTER = "Your name cannot be used to queue songs"

    # SKIP / FORCE_SKIP
    FORCE_SKIPPED = "Skipped the current song"
    NOT_MODERATOR = "You're not mod"

    # Notifications
    PLAYING_YOUR_SONG = "Playing your song now"
    NOW_PLAYING_NOTICE = "Now Playing {owner}'s request: {title}{dedication}"
    NOTICE_DEDICATION = " - dedicated to {target}"
    DEDICATED_TO_YOU = "{owner} dedicated this song to you 💖"
    LIKED_YOUR_SONG = "{count} {people} really liked your song PeepoHappy"

    # Playlist export
    PLAYLIST_HEADER = " currently playing: 🎶 \"{title}\" 🎶 requested by {owner}"
    PLAYLIST_HEADER_IDLE = " nothing is playing right now"
