"""Sync Orchestrator - sequences detection, matching, prompting and loading.

Coordinates the page layer, TrackMatcher, SubtitleRetriever and the picker.
A cycle starts with ``request_subtitles()``; when the page layer answers with
tracks, remembered languages are matched and either loaded silently or the
picker is opened. Picker commands then confirm, load local files, search or
change the episode until the subtitles are loaded.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

import httpx

from tracksync.api.bridge import UiBridge
from tracksync.api.channel import RequestChannel
from tracksync.config import Settings, settings as default_settings
from tracksync.core.errors import (
    ChannelError,
    ConfigurationError,
    RetrievalError,
    SearchFailedError,
)
from tracksync.core.object_urls import ObjectUrlStore
from tracksync.matcher.search_client import SubtitleSearchClient
from tracksync.matcher.track_matcher import TrackMatcher
from tracksync.models.commands import (
    ActiveProfileCommand,
    BridgeCommand,
    ConfirmCommand,
    OpenFileCommand,
    OpenSettingsCommand,
    SearchCommand,
    UpdateEpisodeCommand,
)
from tracksync.models.ui import OpenReason, UiSettings, VideoDataUiModel
from tracksync.models.video_data import (
    NO_TRACK,
    MatchResult,
    RetrievedSubtitleFile,
    SubtitleTrack,
    TrackRequest,
    VideoDataSnapshot,
    empty_track,
)
from tracksync.services.anime_page import (
    GET_SYNCED_DATA,
    NO_ANILIST_ID_MESSAGE,
    SYNCED_DATA,
    tracks_from_search_results,
)
from tracksync.services.event_broadcaster import EventBroadcaster
from tracksync.services.interfaces import PageDelegate, PlaybackContext
from tracksync.services.preference_store import PreferenceStore, SettingsStore
from tracksync.services.site_identity import CHECK_IF_ANIME_SITE, GET_ANIME_TITLE_AND_EPISODE
from tracksync.services.subtitle_retriever import SubtitleRetriever
from tracksync.services.sync_state_machine import SyncState, SyncStateMachine

logger = logging.getLogger(__name__)

OPEN_SETTINGS = "open-asbplayer-settings"
SETTINGS_UPDATED = "settings-updated"


class SyncOrchestrator:
    """Drives one page's subtitle sync cycle."""

    def __init__(
        self,
        playback: PlaybackContext,
        settings_store: SettingsStore,
        bridge: UiBridge,
        page_channel: RequestChannel,
        extension_channel: RequestChannel,
        http_client: httpx.AsyncClient,
        search_client: SubtitleSearchClient,
        page_url: str,
        page_delegate: PageDelegate | None = None,
        object_urls: ObjectUrlStore | None = None,
        config: Settings | None = None,
    ):
        self._playback = playback
        self._settings_store = settings_store
        self._bridge = bridge
        self._page_channel = page_channel
        self._extension_channel = extension_channel
        self._search_client = search_client
        self._page_delegate = page_delegate
        self._config = config or default_settings
        if self._config.subtitle_slots < 1:
            raise ConfigurationError(
                f"subtitle_slots must be at least 1, got {self._config.subtitle_slots}"
            )
        self._domain = urlparse(page_url).netloc

        self._empty_track = empty_track(self._config.empty_track_label)
        self._matcher = TrackMatcher(self._empty_track)
        self._preferences = PreferenceStore(settings_store)
        self._events = EventBroadcaster(bridge)
        self._state = SyncStateMachine(self._events)
        self._retriever = SubtitleRetriever(
            http_client,
            page_channel,
            object_urls=object_urls,
            progress_callback=self._on_progress,
            config=self._config,
        )

        self._auto_sync = False
        self._synced_data: VideoDataSnapshot | None = None
        self._auto_sync_attempted = False
        self._unsubscribe_data: Callable[[], None] | None = None
        self._remove_command_handler: Callable[[], None] | None = None
        self._episode: int | str = ""
        self._is_anime_site = False

        # Playback state captured when the picker opens, restored on resolution
        self._was_paused: bool | None = None
        self._was_fullscreen = False
        self._focus_captured = False
        self._focus_token: Any = None

    @property
    def state(self) -> SyncState:
        return self._state.state

    @property
    def preferences(self) -> PreferenceStore:
        return self._preferences

    @property
    def synced_data(self) -> VideoDataSnapshot | None:
        return self._synced_data

    # --- Lifecycle ---

    async def bind(self) -> None:
        """Refresh whether the current page belongs to a supported anime site."""
        await self._check_if_anime_site()

    async def unbind(self) -> None:
        """Stop listening for page data and forget the current snapshot."""
        if self._unsubscribe_data is not None:
            self._unsubscribe_data()
        self._unsubscribe_data = None
        self._synced_data = None
        await self._state.transition(SyncState.IDLE)

    async def update_settings(
        self,
        auto_sync: bool,
        last_languages_synced: dict[str, list[str]] | None,
    ) -> None:
        """Apply changed user settings.

        Args:
            auto_sync: Whether complete matches load without asking
            last_languages_synced: Remembered languages for every domain
        """
        self._auto_sync = auto_sync
        self._preferences.load(last_languages_synced)

        if self._bridge.loaded:
            await self._events.broadcast_settings(await self._ui_settings())

    async def request_subtitles(self) -> bool:
        """Ask the page layer for the current video's tracks.

        Returns:
            False if the page has no script or is not a video page
        """
        if not self._playback.has_page_script:
            return False
        if self._page_delegate is None or not self._page_delegate.is_video_page():
            return False

        self._synced_data = None
        self._auto_sync_attempted = False

        if self._unsubscribe_data is None:
            self._unsubscribe_data = self._page_channel.subscribe(SYNCED_DATA, self._on_synced_data)

        await self._state.transition(SyncState.WAITING_FOR_DATA)
        await self._page_channel.post(GET_SYNCED_DATA)
        return True

    async def show(self, reason: OpenReason, from_asbplayer_id: str | None = None) -> None:
        """Open the picker."""
        await self._client()

        additional: dict[str, Any] = {"open": True, "open_reason": reason}
        if from_asbplayer_id is not None:
            additional["opened_from_asbplayer_id"] = from_asbplayer_id

        model = await self._build_model(**additional)
        await self._prepare_show()
        await self._events.broadcast_model(model)

    # --- Detection ---

    async def _on_synced_data(self, message: dict[str, Any]) -> None:
        await self.set_synced_data(VideoDataSnapshot.model_validate(message.get("data") or {}))

    async def set_synced_data(self, data: VideoDataSnapshot) -> None:
        """Handle a detection event from the page layer."""
        self._synced_data = data

        if data.subtitles is not None and self._can_auto_sync():
            if self._auto_sync_attempted:
                logger.debug("Auto-sync already attempted for this video, ignoring data")
                return

            self._auto_sync_attempted = True
            result = self._match()

            if result.complete_match:
                await self._state.transition(SyncState.AUTO_SYNC_ATTEMPTING)
                synced = await self._sync_tracks(result.auto_selected_tracks)

                if synced:
                    if not self._bridge.hidden:
                        await self._hide_and_resume()
                    else:
                        await self._finish()
            else:
                logger.info(f"Remembered languages for {self._domain} not all available")
                await self.show(OpenReason.FAILED_TO_AUTO_LOAD_PREFERRED_TRACK)
        elif self._bridge.loaded:
            await self._events.broadcast_model(await self._build_model())

    def _can_auto_sync(self) -> bool:
        if self._page_delegate is None:
            return self._auto_sync
        return self._auto_sync and self._page_delegate.can_auto_sync(self._playback)

    def _match(self) -> MatchResult:
        available = (self._synced_data.subtitles if self._synced_data else None) or []
        return self._matcher.match(self._preferences.languages_for(self._domain), available)

    # --- Picker ---

    async def _client(self) -> None:
        """Make sure the picker is wired to this orchestrator and visible."""
        self._bridge.language = await self._settings_store.get_single("language")

        if self._remove_command_handler is None:
            self._remove_command_handler = self._bridge.on_message(self._on_command)

        self._bridge.show()

    async def _ui_settings(self) -> UiSettings:
        theme_type = await self._settings_store.get_single("themeType")
        profiles = await self._settings_store.profiles()
        active_profile = await self._settings_store.active_profile()
        return UiSettings(
            theme_type=theme_type,
            profiles=profiles,
            active_profile=active_profile.get("name") if active_profile else None,
        )

    async def _build_model(self, **additional: Any) -> VideoDataUiModel:
        match = self._match()
        selected_ids = [track.id or NO_TRACK for track in match.auto_selected_tracks]
        selected_ids += [NO_TRACK] * (self._config.subtitle_slots - len(selected_ids))

        settings = await self._ui_settings()
        title, episode = await self._title_and_episode()
        synced = self._synced_data

        if synced is not None:
            fields: dict[str, Any] = {
                "is_loading": synced.subtitles is None,
                "suggested_name": title or synced.basename,
                "selected_subtitle": selected_ids,
                "subtitles": synced.subtitles or [],
                "error": synced.error,
                "default_checkbox_state": match.complete_match,
                "opened_from_asbplayer_id": "",
                "settings": settings,
                "episode": episode if episode is not None else self._episode,
                "is_anime_site": self._is_anime_site,
            }
        else:
            fields = {
                "is_loading": self._playback.has_page_script,
                "suggested_name": title or self._playback.page_title,
                "selected_subtitle": selected_ids,
                "error": "",
                "show_sub_select": True,
                "subtitles": [],
                "default_checkbox_state": match.complete_match,
                "opened_from_asbplayer_id": "",
                "settings": settings,
                "episode": self._episode,
                "is_anime_site": self._is_anime_site,
            }

        fields.update(additional)
        return VideoDataUiModel(**fields)

    async def _prepare_show(self) -> None:
        await self._client()
        await self._check_if_anime_site()
        title, episode = await self._title_and_episode()
        basename = self._synced_data.basename if self._synced_data else ""

        await self._events.broadcast_show(
            is_anime_site=self._is_anime_site,
            suggested_name=title or basename or self._playback.page_title,
            episode=episode if episode is not None else "",
        )

        # Keep what was captured before an error bounce
        if self._was_paused is None:
            self._was_paused = self._playback.paused
        self._playback.pause()

        if self._playback.exit_fullscreen():
            self._was_fullscreen = True

        if not self._focus_captured:
            self._focus_token = self._playback.capture_focus()
            self._focus_captured = True

        self._playback.unbind_key_bindings()
        self._playback.set_overlays_hidden(True)
        await self._state.transition(SyncState.PROMPTING)

    async def _hide_and_resume(self) -> None:
        self._playback.bind_key_bindings()
        self._playback.set_overlays_hidden(False)
        self._bridge.hide()

        if self._was_fullscreen:
            self._playback.request_fullscreen()
            self._was_fullscreen = False

        self._playback.restore_focus(self._focus_token)
        self._focus_token = None
        self._focus_captured = False

        if not self._was_paused:
            self._playback.play()
        self._was_paused = None

        await self._finish()

    async def _finish(self) -> None:
        await self._state.transition(SyncState.RESOLVED)
        await self._state.transition(SyncState.IDLE)

    async def _report_skipped_track(self, error: str) -> None:
        """Report a skipped track on the player as well as in the picker."""
        self._playback.notification(error)
        await self._report_error(error)

    async def _report_error(self, error: str) -> None:
        """Re-open the picker showing ``error``."""
        logger.warning(f"Reporting sync error: {error}")
        await self._client()
        theme_type = await self._settings_store.get_single("themeType")
        await self._prepare_show()
        await self._events.broadcast_error(error, theme_type)

    # --- Commands ---

    async def _on_command(self, command: BridgeCommand) -> None:
        if isinstance(command, OpenSettingsCommand):
            await self._extension_channel.post(OPEN_SETTINGS, {"src": self._playback.video_src})
            return

        if isinstance(command, ActiveProfileCommand):
            await self._settings_store.set_active_profile(command.profile)
            await self._extension_channel.post(SETTINGS_UPDATED, {"src": self._playback.video_src})
            return

        synced = False

        if isinstance(command, ConfirmCommand):
            if command.should_remember_track_choices:
                await self._preferences.remember(
                    self._domain, [track.language for track in command.data]
                )
            requests = [
                TrackRequest(
                    name=track.name,
                    language=track.language,
                    extension=track.extension,
                    url=track.url,
                    is_local_file=bool(track.is_local_file),
                )
                for track in command.data
            ]
            synced = await self._sync_requests(requests, command.sync_with_asbplayer_id)
        elif isinstance(command, OpenFileCommand):
            try:
                files = [subtitle.decode() for subtitle in command.subtitles]
            except ValueError as e:
                await self._report_error(str(e))
            else:
                self._load(files, flatten=False)
                synced = True
        elif isinstance(command, UpdateEpisodeCommand):
            self._episode = command.episode if command.episode is not None else ""
            await self._events.broadcast_episode(self._episode)
        elif isinstance(command, SearchCommand):
            await self._handle_search(command)

        if synced:
            await self._hide_and_resume()

    async def _handle_search(self, command: SearchCommand) -> None:
        await self._client()
        await self._events.broadcast_search_started()
        api_key = await self._settings_store.get_single("apiKey") or ""

        try:
            external_id = await asyncio.to_thread(
                self._search_client.resolve_external_id, command.title
            )
            if not external_id:
                raise SearchFailedError(NO_ANILIST_ID_MESSAGE)

            results = await asyncio.to_thread(
                self._search_client.search_subtitles, external_id, command.episode or 0, api_key
            )
            if isinstance(results, str):
                raise SearchFailedError(results)
        except SearchFailedError as e:
            await self._events.broadcast_search_failed(str(e))
            return

        fetched = tracks_from_search_results(
            results,
            self._config.search_result_language,
            self._config.search_result_extension,
            id_prefix="fetched-",
        )
        subtitles = [self._empty_track, *fetched]
        base = self._synced_data or VideoDataSnapshot()
        self._synced_data = base.model_copy(update={"subtitles": subtitles})
        logger.info(f"Search for '{command.title}' found {len(fetched)} subtitle(s)")

        title, _ = await self._title_and_episode()
        await self._events.broadcast_search_results(subtitles, command.episode, title)

    # --- Retrieval ---

    def _default_video_name(self, basename: str | None, track: SubtitleTrack) -> str:
        if track.url == NO_TRACK:
            return basename or ""
        if basename:
            return f"{basename} - {track.label}"
        return track.label

    async def _sync_tracks(self, tracks: list[SubtitleTrack]) -> bool:
        basename = self._synced_data.basename if self._synced_data else None
        requests = [
            TrackRequest(
                name=self._default_video_name(basename, track),
                language=track.language,
                extension=track.extension,
                url=track.url,
                is_local_file=bool(track.is_local_file),
            )
            for track in tracks
        ]
        return await self._sync_requests(requests)

    async def _sync_requests(
        self,
        requests: list[TrackRequest],
        sync_with_asbplayer_id: str | None = None,
    ) -> bool:
        try:
            batch = await self._retriever.retrieve_all(requests, on_error=self._report_skipped_track)
        except RetrievalError as e:
            await self._report_error(f"Data Sync failed: {e}")
            return False

        self._load(batch.files, batch.flatten, sync_with_asbplayer_id)
        return True

    def _load(
        self,
        files: list[RetrievedSubtitleFile],
        flatten: bool,
        sync_with_asbplayer_id: str | None = None,
    ) -> None:
        logger.info(f"Loading {len(files)} subtitle file(s) (flatten={flatten})")
        self._playback.load_subtitles(files, flatten, sync_with_asbplayer_id)

    def _on_progress(self, name: str, percent: int) -> None:
        self._playback.notification(f"{name} ({percent}%)")

    # --- Site identity ---

    async def _check_if_anime_site(self) -> None:
        try:
            response = await self._extension_channel.request(CHECK_IF_ANIME_SITE)
        except ChannelError as e:
            logger.warning(f"Site check failed: {e}")
            response = None
        self._is_anime_site = bool((response or {}).get("isAnimeSite"))

    async def _title_and_episode(self) -> tuple[str, int | None]:
        """Current title and episode; ("", None) when the page is not identified."""
        try:
            response = await self._extension_channel.request(GET_ANIME_TITLE_AND_EPISODE)
        except ChannelError as e:
            logger.warning(f"Title lookup failed: {e}")
            return "", None

        if not response or response.get("error"):
            return "", None
        return response.get("title") or "", response.get("episode")
