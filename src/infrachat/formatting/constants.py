"""Presentation and display constants for infrachat."""

# Unified borderline style for transcript and REPL banners.
BORDERLINE_CHAR = "="
BORDERLINE_WIDTH = 80

# Search radius for smart text truncation.
TRUNCATE_SEARCH_RADIUS = 10

# Display fallbacks for missing data.
DISPLAY_UNKNOWN = "unknown"
DISPLAY_NONE = "none"

# Date/time display formats for user-facing output.
DATETIME_FORMAT_FULL = "%Y-%m-%d %H:%M:%S"
DATETIME_FORMAT_SHORT = "%Y-%m-%d %H:%M"

# Role display emojis.
EMOJI_ROLE_USER = "🍼"
EMOJI_ROLE_ASSISTANT = "🚀"

# Execution status markers.
EMOJI_STATUS_RUNNING = "⏳"
EMOJI_STATUS_SUCCESS = "✅"
EMOJI_STATUS_FAILURE = "❌"

# Default preview length for /history lines.
HISTORY_PREVIEW_LENGTH = 100
