"""Core pytest fixtures for tracksync tests."""

from typing import Any

import pytest

from tracksync.config import Settings
from tracksync.models.video_data import SubtitleTrack
from tracksync.services.interfaces import PageDelegate, PlaybackContext
from tracksync.services.preference_store import InMemorySettingsStore

HIANIME_URL = "https://hianime.to/watch/frieren-18542?ep=107257"

HIANIME_HTML = """
<html>
  <head><title>Watch Frieren</title></head>
  <body>
    <h2 class="film-name"><a href="/frieren-18542">Frieren: Beyond Journey's End</a></h2>
    <div class="ss-list">
      <a class="ssl-item ep-item" href="#">1</a>
      <a class="ssl-item ep-item active" href="#">5</a>
    </div>
  </body>
</html>
"""

HIANIME_LOADING_HTML = """
<html><head><title>Watch</title></head><body><h2 class="film-name"></h2></body></html>
"""


class FakePlayback(PlaybackContext):
    """Records every call the orchestrator makes on the player."""

    def __init__(self, paused: bool = False, fullscreen: bool = False):
        self.has_page_script = True
        self._paused = paused
        self.fullscreen = fullscreen
        self.calls: list[str] = []
        self.notifications: list[str] = []
        self.loaded: list[tuple[list, bool, str | None]] = []
        self.focus_restored: list[Any] = []
        self.overlays_hidden = False
        self.key_bindings_bound = True

    @property
    def video_src(self) -> str:
        return "https://cdn.example.com/video.mp4"

    @property
    def page_title(self) -> str:
        return "Page Title"

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self.calls.append("pause")
        self._paused = True

    def play(self) -> None:
        self.calls.append("play")
        self._paused = False

    def exit_fullscreen(self) -> bool:
        was_fullscreen = self.fullscreen
        self.fullscreen = False
        return was_fullscreen

    def request_fullscreen(self) -> None:
        self.calls.append("request_fullscreen")
        self.fullscreen = True

    def capture_focus(self) -> Any:
        self.calls.append("capture_focus")
        return "video-element"

    def restore_focus(self, token: Any) -> None:
        self.focus_restored.append(token)

    def bind_key_bindings(self) -> None:
        self.key_bindings_bound = True

    def unbind_key_bindings(self) -> None:
        self.key_bindings_bound = False

    def set_overlays_hidden(self, hidden: bool) -> None:
        self.overlays_hidden = hidden

    def notification(self, text: str) -> None:
        self.notifications.append(text)

    def load_subtitles(self, files, flatten, sync_with_asbplayer_id=None) -> None:
        self.loaded.append((list(files), flatten, sync_with_asbplayer_id))


class FakePageDelegate(PageDelegate):
    def __init__(self, video_page: bool = True, auto_sync: bool = True):
        self.video_page = video_page
        self.auto_sync = auto_sync

    def is_video_page(self) -> bool:
        return self.video_page

    def can_auto_sync(self, video: Any) -> bool:
        return self.auto_sync


@pytest.fixture
def test_settings():
    """Settings without file logging and with a short detection budget."""
    return Settings(
        log_file="",
        site_detection_max_retries=2,
        site_detection_delay=0.5,
        navigation_poll_interval=0.1,
    )


@pytest.fixture
def fake_sleep():
    """Injectable sleep that records requested delays without waiting."""
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays
    return sleep


@pytest.fixture
def playback():
    return FakePlayback()


@pytest.fixture
def page_delegate():
    return FakePageDelegate()


@pytest.fixture
def settings_store():
    """Settings store with a theme, a Jimaku key and one profile."""
    return InMemorySettingsStore(
        {"themeType": "dark", "language": "en", "apiKey": "jimaku-key"},
        profiles=[{"name": "Default"}],
        active_profile="Default",
    )


@pytest.fixture
def english_track():
    return SubtitleTrack(
        id="en-1",
        language="en",
        url="https://subs.example.com/en.vtt",
        label="English",
        extension="vtt",
    )


@pytest.fixture
def japanese_track():
    return SubtitleTrack(
        id="ja-1",
        language="ja",
        url="https://subs.example.com/ja.srt",
        label="Japanese",
        extension="srt",
    )


@pytest.fixture
def hianime_url():
    return HIANIME_URL


@pytest.fixture
def hianime_html():
    return HIANIME_HTML


@pytest.fixture
def hianime_loading_html():
    return HIANIME_LOADING_HTML
