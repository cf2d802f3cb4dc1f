"""Unit tests for EventBroadcaster.

Tests the picker message shapes behind each semantic method.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tracksync.api.bridge import UiBridge
from tracksync.models.ui import OpenReason, UiSettings, VideoDataUiModel
from tracksync.services.event_broadcaster import EventBroadcaster
from tracksync.services.sync_state_machine import SyncState


@pytest.fixture
def mock_bridge():
    bridge = MagicMock(spec=UiBridge)
    bridge.update_state = AsyncMock()
    bridge.send_sync_state = AsyncMock()
    return bridge


@pytest.fixture
def broadcaster(mock_bridge):
    return EventBroadcaster(mock_bridge)


@pytest.mark.asyncio
class TestStateEvents:
    async def test_broadcast_model_uses_wire_names(self, broadcaster, mock_bridge):
        model = VideoDataUiModel(
            open=True,
            open_reason=OpenReason.FAILED_TO_AUTO_LOAD_PREFERRED_TRACK,
            suggested_name="Show",
            selected_subtitle=["-", "-", "-"],
        )

        await broadcaster.broadcast_model(model)

        state = mock_bridge.update_state.call_args[0][0]
        assert state["openReason"] == "failedToAutoLoadPreferredTrack"
        assert state["suggestedName"] == "Show"
        assert state["selectedSubtitle"] == ["-", "-", "-"]
        assert "showSubSelect" not in state

    async def test_broadcast_settings(self, broadcaster, mock_bridge):
        await broadcaster.broadcast_settings(
            UiSettings(theme_type="dark", profiles=[{"name": "A"}], active_profile="A")
        )

        mock_bridge.update_state.assert_awaited_once_with(
            {"settings": {"themeType": "dark", "profiles": [{"name": "A"}], "activeProfile": "A"}}
        )

    async def test_broadcast_episode(self, broadcaster, mock_bridge):
        await broadcaster.broadcast_episode(7)

        mock_bridge.update_state.assert_awaited_once_with({"episode": 7, "open": True})

    async def test_broadcast_sync_state(self, broadcaster, mock_bridge):
        await broadcaster.broadcast_sync_state(SyncState.PROMPTING)

        mock_bridge.send_sync_state.assert_awaited_once_with("prompting")


@pytest.mark.asyncio
class TestErrorAndSearchEvents:
    async def test_broadcast_error(self, broadcaster, mock_bridge):
        await broadcaster.broadcast_error("Data Sync failed: boom", "light")

        mock_bridge.update_state.assert_awaited_once_with(
            {
                "open": True,
                "isLoading": False,
                "showSubSelect": True,
                "error": "Data Sync failed: boom",
                "themeType": "light",
            }
        )

    async def test_broadcast_search_started_clears_error(self, broadcaster, mock_bridge):
        await broadcaster.broadcast_search_started()

        mock_bridge.update_state.assert_awaited_once_with(
            {"isLoading": True, "error": None, "open": True}
        )

    async def test_broadcast_search_results(self, broadcaster, mock_bridge, japanese_track):
        await broadcaster.broadcast_search_results([japanese_track], 3, "Frieren")

        state = mock_bridge.update_state.call_args[0][0]
        assert state["subtitles"][0]["id"] == "ja-1"
        assert state["episode"] == 3
        assert state["isLoading"] is False
        assert state["suggestedName"] == "Frieren"

    async def test_broadcast_search_failed(self, broadcaster, mock_bridge):
        await broadcaster.broadcast_search_failed("No subtitles found for episode 3")

        mock_bridge.update_state.assert_awaited_once_with(
            {"error": "No subtitles found for episode 3", "isLoading": False, "open": True}
        )
