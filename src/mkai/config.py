"""Configuration constants and environment-driven settings.

Centralizes the fixed values of the chat pipeline (history window, sentinel,
fallback replies, storage key) and the handful of settings read from the
environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Remote models
DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
REPLY_TEMPERATURE = 0.9

# Conversation context
HISTORY_WINDOW_SIZE = 10  # Prior messages sent as model context

# Persistence
HISTORY_STORAGE_KEY = "mk_ai_history"
DEFAULT_DB_PATH = Path.home() / ".mkai" / "history.db"

# Reply protocol
IMAGE_SENTINEL = "GENERATING_IMAGE:"
EMPTY_REPLY_FALLBACK = "Something went wrong, but I'm still the strongest."
GLITCH_REPLY = "I faced a temporary glitch, but my power remains absolute. Please try again."
IMAGE_CAPTION_TEMPLATE = 'Master, here is the image for: "{prompt}"'

# Exported images
EXPORT_FILENAME_TEMPLATE = "MK_AI_Generated_{timestamp}.png"

# Voice
DEFAULT_VOICE_LOCALE = "en-US"
SPEECH_RATE = 1.0
SPEECH_PITCH = 1.0


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from environment variables.

    Environment variables:
        GEMINI_API_KEY: Google AI API key (API_KEY is accepted as well)
        MKAI_TEXT_MODEL: Text model (default: gemini-3-flash-preview)
        MKAI_IMAGE_MODEL: Image model (default: gemini-2.5-flash-image)
        MKAI_STORE: History backend, 'sqlite' or 'memory' (default: sqlite)
        MKAI_DB_PATH: SQLite history file (default: ~/.mkai/history.db)
        MKAI_VOICE_LOCALE: Speech locale (default: en-US)
        MKAI_LOG_LEVEL: Logging level name (default: WARNING)
    """

    api_key: str | None = None
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    store_backend: str = "sqlite"
    db_path: Path = DEFAULT_DB_PATH
    voice_locale: str = DEFAULT_VOICE_LOCALE
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            text_model=os.getenv("MKAI_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            image_model=os.getenv("MKAI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            store_backend=os.getenv("MKAI_STORE", "sqlite").lower(),
            db_path=Path(os.getenv("MKAI_DB_PATH", str(DEFAULT_DB_PATH))).expanduser(),
            voice_locale=os.getenv("MKAI_VOICE_LOCALE", DEFAULT_VOICE_LOCALE),
            log_level=os.getenv("MKAI_LOG_LEVEL", "WARNING").upper(),
        )
