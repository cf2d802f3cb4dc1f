"""Host-side collaborators of the sync orchestrator."""

import abc
from typing import Any

from tracksync.models.video_data import RetrievedSubtitleFile


class PageDelegate(abc.ABC):
    """Site-specific knowledge about the current page."""

    @abc.abstractmethod
    def is_video_page(self) -> bool:
        pass

    @abc.abstractmethod
    def can_auto_sync(self, video: Any) -> bool:
        """Whether the current video may be synced without asking."""
        pass


class PlaybackContext(abc.ABC):
    """The video element and player chrome the picker temporarily takes over.

    ``capture_focus`` returns an opaque token for whatever held focus; the
    token goes back to ``restore_focus`` (None restores window focus).
    """

    has_page_script: bool = True

    @property
    @abc.abstractmethod
    def video_src(self) -> str:
        pass

    @property
    @abc.abstractmethod
    def page_title(self) -> str:
        pass

    @property
    @abc.abstractmethod
    def paused(self) -> bool:
        pass

    @abc.abstractmethod
    def pause(self) -> None:
        pass

    @abc.abstractmethod
    def play(self) -> None:
        pass

    @abc.abstractmethod
    def exit_fullscreen(self) -> bool:
        """Leave fullscreen; True if the player was fullscreen."""
        pass

    @abc.abstractmethod
    def request_fullscreen(self) -> None:
        pass

    @abc.abstractmethod
    def capture_focus(self) -> Any:
        pass

    @abc.abstractmethod
    def restore_focus(self, token: Any) -> None:
        pass

    @abc.abstractmethod
    def bind_key_bindings(self) -> None:
        pass

    @abc.abstractmethod
    def unbind_key_bindings(self) -> None:
        pass

    @abc.abstractmethod
    def set_overlays_hidden(self, hidden: bool) -> None:
        """Force-hide rendered subtitles and mobile overlays."""
        pass

    @abc.abstractmethod
    def notification(self, text: str) -> None:
        pass

    @abc.abstractmethod
    def load_subtitles(
        self,
        files: list[RetrievedSubtitleFile],
        flatten: bool,
        sync_with_asbplayer_id: str | None = None,
    ) -> None:
        pass
