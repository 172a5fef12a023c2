"""Configuration constants for podcast_ingest.

All constants are re-exported from config.py for convenience.
"""

# General defaults
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_USER_AGENT = "podcast-ingest/0.1.0"
DEFAULT_HTTP_RETRIES = 0

# Feed cache defaults
DEFAULT_CACHE_TTL_SECONDS = 3600

# Read-path defaults (episode list pagination)
DEFAULT_EPISODES_PER_PAGE = 12
MAX_EPISODES_PER_PAGE = 100

# Slug generation
MAX_SLUG_LENGTH = 100

# Mapper fallbacks for absent channel/item fields
DEFAULT_PODCAST_TITLE = "Untitled Podcast"
DEFAULT_EPISODE_TITLE = "Untitled Episode"
DEFAULT_AUTHOR = "Unknown"
DEFAULT_AUDIO_TYPE = "audio/mpeg"
DEFAULT_CHAPTERS_TYPE = "application/json+chapters"
DEFAULT_TRANSCRIPT_TYPE = "text/plain"

# Transcript selection order when a feed offers several formats
TRANSCRIPT_TYPE_PREFERENCE = ("text/vtt", "application/x-subrip", "text/plain")

# Validation constants
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MIN_TIMEOUT_SECONDS = 1
