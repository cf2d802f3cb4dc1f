"""Domain-specific picker event layer.

Provides semantic methods that wrap the bridge's state updates, keeping the
orchestrator unaware of the message shapes the picker expects.
"""

from typing import Any

from tracksync.api.bridge import UiBridge
from tracksync.models.ui import UiSettings, VideoDataUiModel
from tracksync.models.video_data import SubtitleTrack


class EventBroadcaster:
    """Picker state broadcasting."""

    def __init__(self, bridge: UiBridge):
        self._bridge = bridge

    # --- Full and partial state ---

    async def broadcast_model(self, model: VideoDataUiModel):
        """Push a fully built picker model."""
        await self._bridge.update_state(model.to_wire())

    async def broadcast_show(
        self,
        is_anime_site: bool,
        suggested_name: str,
        episode: int | str,
    ):
        """Open the picker with the latest identity information."""
        await self._bridge.update_state(
            {
                "isAnimeSite": is_anime_site,
                "suggestedName": suggested_name,
                "episode": episode,
                "open": True,
            }
        )

    async def broadcast_settings(self, settings: UiSettings):
        """Push theme and profile settings."""
        await self._bridge.update_state({"settings": settings.to_wire()})

    async def broadcast_episode(self, episode: int | str):
        """Confirm an episode change while keeping the picker open."""
        await self._bridge.update_state({"episode": episode, "open": True})

    # --- Errors ---

    async def broadcast_error(self, error: str, theme_type: str | None = None):
        """Re-open the picker showing ``error``."""
        await self._bridge.update_state(
            {
                "open": True,
                "isLoading": False,
                "showSubSelect": True,
                "error": error,
                "themeType": theme_type,
            }
        )

    # --- Search ---

    async def broadcast_search_started(self):
        await self._bridge.update_state({"isLoading": True, "error": None, "open": True})

    async def broadcast_search_results(
        self,
        subtitles: list[SubtitleTrack],
        episode: int | None,
        suggested_name: str,
    ):
        """Show tracks found by a remote search."""
        await self._bridge.update_state(
            {
                "subtitles": [track.to_wire() for track in subtitles],
                "isLoading": False,
                "episode": episode,
                "open": True,
                "suggestedName": suggested_name,
            }
        )

    async def broadcast_search_failed(self, error: str):
        await self._bridge.update_state({"error": error, "isLoading": False, "open": True})

    # --- Orchestrator state ---

    async def broadcast_sync_state(self, state: Any):
        """Broadcast an orchestrator state transition."""
        await self._bridge.send_sync_state(getattr(state, "value", state))
