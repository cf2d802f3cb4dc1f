# search_client.py
import abc
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import requests
from loguru import logger

from tracksync.config import Settings, settings as default_settings
from tracksync.core.errors import SearchFailedError, handle_errors

F = TypeVar("F", bound=Callable[..., Any])

ANILIST_SEARCH_QUERY = """
query ($search: String) {
  Media(search: $search, type: ANIME) {
    id
    title { romaji english native }
  }
}
"""


def retry_network_operation(max_retries: int = 3, base_delay: float = 1.0) -> Callable[[F], F]:
    """Decorator for retrying network operations."""

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception = None
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (requests.ConnectionError, requests.Timeout) as e:
                    last_exception = e
                    if attempt == max_retries:
                        logger.error(
                            f"Max retries ({max_retries}) exceeded for {func.__name__}: {e}"
                        )
                        raise e

                    logger.warning(
                        f"Network retry {attempt + 1}/{max_retries + 1} for {func.__name__}: {e}"
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, 30)  # Cap at 30 seconds

            raise last_exception

        return wrapper  # type: ignore

    return decorator


class SubtitleSearchClient(abc.ABC):
    """Remote metadata and subtitle search.

    Implementations are blocking; the orchestrator calls them through
    ``asyncio.to_thread``.
    """

    @abc.abstractmethod
    def resolve_external_id(self, title: str) -> int | None:
        pass

    @abc.abstractmethod
    def search_subtitles(
        self, external_id: int, episode: int, api_key: str
    ) -> list[dict[str, str]] | str:
        """Return ``[{"name", "url"}, ...]`` or a human-readable error string."""
        pass


class AnilistJimakuClient(SubtitleSearchClient):
    """Resolves titles on AniList and lists episode subtitles on Jimaku."""

    def __init__(self, config: Settings | None = None):
        self._config = config or default_settings

    @handle_errors(
        error_types=(requests.RequestException, ValueError),
        default_message="AniList lookup failed",
        log_level="warning",
        wrap_as=SearchFailedError,
    )
    @retry_network_operation(max_retries=3, base_delay=1.0)
    def resolve_external_id(self, title: str) -> int | None:
        """
        Fetch the AniList ID for an anime title.

        Args:
            title (str): Title as shown on the streaming site.

        Returns:
            int: The AniList media ID, or None if not found.
        """
        logger.debug(f"Searching AniList for '{title}'")

        response = requests.post(
            self._config.anilist_url,
            json={"query": ANILIST_SEARCH_QUERY, "variables": {"search": title}},
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=30,
        )

        if response.status_code == 404:
            # AniList answers "Not Found." for searches without a match
            logger.info(f"No AniList match for '{title}'")
            return None
        response.raise_for_status()

        media = (response.json().get("data") or {}).get("Media")
        if not media:
            logger.info(f"No AniList match for '{title}'")
            return None

        logger.info(f"Matched '{title}' to AniList ID {media['id']}")
        return int(media["id"])

    @handle_errors(
        error_types=(requests.RequestException, ValueError),
        default_message="Jimaku search failed",
        log_level="warning",
        wrap_as=SearchFailedError,
    )
    @retry_network_operation(max_retries=3, base_delay=1.0)
    def search_subtitles(
        self, external_id: int, episode: int, api_key: str
    ) -> list[dict[str, str]] | str:
        """
        List the subtitle files Jimaku holds for one episode.

        Args:
            external_id (int): AniList media ID.
            episode (int): Episode number.
            api_key (str): Jimaku API key.

        Returns:
            list: ``{"name", "url"}`` dicts, or an error string.
        """
        if not api_key:
            logger.warning("Jimaku API key not configured")
            return "Jimaku API key is not set"

        headers = {"Authorization": api_key, "Accept": "application/json"}
        base_url = self._config.jimaku_url.rstrip("/")

        response = requests.get(
            f"{base_url}/entries/search",
            headers=headers,
            params={"anilist_id": external_id, "anime": "true"},
            timeout=30,
        )
        if response.status_code != 200:
            logger.warning(f"Jimaku entry search returned {response.status_code}")
            return f"Error searching subtitles: {response.status_code}"

        entries = response.json()
        if not entries:
            return "No subtitle entries found for this title"

        entry_id = entries[0]["id"]
        logger.debug(f"Using Jimaku entry {entry_id} for AniList ID {external_id}")

        response = requests.get(
            f"{base_url}/entries/{entry_id}/files",
            headers=headers,
            params={"episode": episode},
            timeout=30,
        )
        if response.status_code != 200:
            logger.warning(f"Jimaku file listing returned {response.status_code}")
            return f"Error fetching subtitle files: {response.status_code}"

        files = response.json()
        if not files:
            return f"No subtitles found for episode {episode}"

        logger.info(f"Found {len(files)} subtitle file(s) for episode {episode}")
        return [{"name": f.get("name", ""), "url": f.get("url", "")} for f in files]
