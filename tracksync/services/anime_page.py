"""Page-layer data source for supported anime streaming sites.

Watches the page URL, identifies title and episode, searches remote subtitles
and publishes the result to the core as a ``synced-data`` event. Results are
cached per URL so navigating back to an episode does not search again.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from tracksync.api.channel import RequestChannel
from tracksync.config import Settings, settings as default_settings
from tracksync.core.errors import SearchFailedError
from tracksync.core.site_resolver import SiteInfoResolver
from tracksync.core.sites import SITE_CATALOG, SiteCatalog
from tracksync.matcher.search_client import SubtitleSearchClient
from tracksync.models.site import SiteExtractionFailure
from tracksync.models.video_data import SubtitleTrack, VideoDataSnapshot
from tracksync.services.interfaces import PageDelegate
from tracksync.services.preference_store import SettingsStore

logger = logging.getLogger(__name__)

GET_SYNCED_DATA = "get-synced-data"
GET_SYNCED_LANGUAGE_DATA = "get-synced-language-data"
SYNCED_DATA = "synced-data"

NO_ANILIST_ID_MESSAGE = "Unable to find Anilist ID for the given title"


def tracks_from_search_results(
    results: list[dict[str, str]],
    language: str,
    extension: str,
    id_prefix: str = "",
) -> list[SubtitleTrack]:
    """Convert ``{"name", "url"}`` search results into subtitle tracks.

    Results missing a name or URL are dropped.
    """
    tracks = [
        SubtitleTrack(
            id=f"{id_prefix}{index}",
            language=language,
            url=result.get("url", ""),
            label=result.get("name", ""),
            extension=extension,
        )
        for index, result in enumerate(results)
    ]
    return [track for track in tracks if track.url and track.label]


class AnimePageDataSource(PageDelegate):
    """Provides subtitle choices for the current anime episode page."""

    def __init__(
        self,
        channel: RequestChannel,
        resolver: SiteInfoResolver,
        search_client: SubtitleSearchClient,
        settings_store: SettingsStore,
        url_source: Callable[[], str],
        catalog: SiteCatalog = SITE_CATALOG,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        config: Settings | None = None,
    ):
        self._channel = channel
        self._resolver = resolver
        self._search_client = search_client
        self._settings_store = settings_store
        self._url_source = url_source
        self._catalog = catalog
        self._sleep = sleep
        self._config = config or default_settings

        self._cache: dict[str, VideoDataSnapshot] = {}
        self._last_url_dispatched: str | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    # --- PageDelegate ---

    def is_video_page(self) -> bool:
        return self._catalog.is_player_url(self._url_source())

    def can_auto_sync(self, video: Any) -> bool:
        return self.is_video_page()

    # --- Channel wiring ---

    def bind(self) -> None:
        """Answer ``get-synced-data`` and ``get-synced-language-data`` requests."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self._channel.subscribe(GET_SYNCED_DATA, self._on_get_synced_data),
            self._channel.subscribe(GET_SYNCED_LANGUAGE_DATA, self._on_get_language_data),
        ]

    def unbind(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def _on_get_synced_data(self, message: dict[str, Any]) -> None:
        await self.fetch_and_dispatch()

    async def _on_get_language_data(self, message: dict[str, Any]) -> dict[str, Any]:
        language = message.get("language")
        snapshot = await self.fetch(self._url_source())
        subtitles = [t for t in snapshot.subtitles or [] if t.language == language]
        return VideoDataSnapshot(
            basename=snapshot.basename, subtitles=subtitles, error=snapshot.error
        ).to_wire()

    # --- Data ---

    async def fetch(self, url: str) -> VideoDataSnapshot:
        """Identify the episode at ``url`` and search its subtitles.

        Failures end up in the snapshot's ``error``; only successful results
        are cached.
        """
        cached = self._cache.get(url)
        if cached is not None:
            logger.debug(f"Using cached subtitles for {url}")
            return cached

        basename = ""
        subtitles: list[SubtitleTrack] = []

        try:
            result = await self._resolver.resolve(url)
            if isinstance(result, SiteExtractionFailure):
                raise SearchFailedError(result.error)

            basename = result.title
            api_key = await self._settings_store.get_single("apiKey") or ""

            external_id = result.external_id
            if external_id is None:
                external_id = await asyncio.to_thread(
                    self._search_client.resolve_external_id, result.title
                )
            if not external_id:
                raise SearchFailedError(NO_ANILIST_ID_MESSAGE)

            found = await asyncio.to_thread(
                self._search_client.search_subtitles, external_id, result.episode, api_key
            )
            if isinstance(found, str):
                raise SearchFailedError(found)

            subtitles = tracks_from_search_results(
                found,
                self._config.search_result_language,
                self._config.search_result_extension,
            )
        except SearchFailedError as e:
            logger.info(f"No subtitles for {url}: {e}")
            return VideoDataSnapshot(basename=basename, subtitles=subtitles, error=str(e))

        snapshot = VideoDataSnapshot(basename=basename, subtitles=subtitles, error="")
        self._cache[url] = snapshot
        return snapshot

    async def fetch_and_dispatch(self) -> VideoDataSnapshot:
        """Fetch data for the current URL and publish it if there is anything to show."""
        snapshot = await self.fetch(self._url_source())

        if snapshot.subtitles or snapshot.error:
            await self._channel.post(SYNCED_DATA, {"data": snapshot.to_wire()})
        return snapshot

    async def watch(self, interval: float | None = None) -> None:
        """Dispatch fresh data whenever the page URL changes. Runs until cancelled."""
        if interval is None:
            interval = self._config.navigation_poll_interval

        while True:
            current_url = self._url_source()
            if current_url != self._last_url_dispatched:
                self._last_url_dispatched = current_url
                await self.fetch_and_dispatch()
            await self._sleep(interval)
