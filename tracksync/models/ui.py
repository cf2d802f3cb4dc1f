"""Picker UI state models."""

from enum import Enum

from tracksync.models.base import WireModel
from tracksync.models.video_data import SubtitleTrack


class OpenReason(str, Enum):
    """Why the picker was opened."""

    USER_REQUESTED = "userRequested"
    FAILED_TO_AUTO_LOAD_PREFERRED_TRACK = "failedToAutoLoadPreferredTrack"
    MISCELLANEOUS = "miscellaneous"


class UiSettings(WireModel):
    theme_type: str | None = None
    profiles: list[dict] = []
    active_profile: str | None = None


class VideoDataUiModel(WireModel):
    """Full picker state pushed when the picker is (re)rendered."""

    open: bool | None = None
    open_reason: OpenReason | None = None
    is_loading: bool = False
    suggested_name: str = ""
    selected_subtitle: list[str] = []
    subtitles: list[SubtitleTrack] = []
    error: str | None = ""
    show_sub_select: bool | None = None
    default_checkbox_state: bool = False
    opened_from_asbplayer_id: str = ""
    settings: UiSettings | None = None
    episode: int | str = ""
    is_anime_site: bool = False

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
