"""Library-level configuration from environment variables.

Every field has a default, so no .env file is required. Components read the
module-level ``settings`` instance unless an explicit override is passed in.

User-facing preferences (remembered languages, auto-sync flag, API key,
profiles) are not configuration: they live in the host's settings store, see
services/preference_store.py.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_log_file() -> str:
    """Return the default log location under the user's home directory."""
    return str(Path.home() / ".tracksync" / "tracksync.log")


class Settings(BaseSettings):
    """Tuning knobs for detection, retrieval and logging."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Site detection
    site_detection_max_retries: int = 10
    site_detection_delay: float = 1.0  # Seconds between polls
    navigation_poll_interval: float = 1.0  # Seconds between URL change checks

    # Retrieval (None = no timeout on individual fetches)
    request_timeout: float | None = None

    # Picker
    subtitle_slots: int = 3
    empty_track_label: str = "No subtitle"

    # Remote search
    anilist_url: str = "https://graphql.anilist.co"
    jimaku_url: str = "https://jimaku.cc/api"
    search_result_language: str = "ja"
    search_result_extension: str = "srt"

    # Logging
    debug: bool = False
    log_file: str = _default_log_file()


settings = Settings()
