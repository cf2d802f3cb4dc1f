"""Services: retrieval, orchestration and the collaborators around them."""

from tracksync.services.anime_page import AnimePageDataSource
from tracksync.services.event_broadcaster import EventBroadcaster
from tracksync.services.interfaces import PageDelegate, PlaybackContext
from tracksync.services.preference_store import (
    InMemorySettingsStore,
    PreferenceStore,
    SettingsStore,
)
from tracksync.services.site_identity import SiteIdentityService
from tracksync.services.subtitle_retriever import SubtitleRetriever
from tracksync.services.sync_orchestrator import SyncOrchestrator
from tracksync.services.sync_state_machine import SyncState, SyncStateMachine

__all__ = [
    "SyncOrchestrator",
    "SubtitleRetriever",
    "SyncState",
    "SyncStateMachine",
    "EventBroadcaster",
    "PreferenceStore",
    "SettingsStore",
    "InMemorySettingsStore",
    "SiteIdentityService",
    "AnimePageDataSource",
    "PageDelegate",
    "PlaybackContext",
]
