"""Data models for tracksync."""

from tracksync.models.commands import (
    ActiveProfileCommand,
    BridgeCommand,
    ConfirmCommand,
    OpenFileCommand,
    OpenSettingsCommand,
    SearchCommand,
    UpdateEpisodeCommand,
)
from tracksync.models.site import (
    FailureReason,
    PageState,
    RawSiteInfo,
    SiteExtractionFailure,
    SiteExtractionResult,
    SiteInfo,
)
from tracksync.models.ui import OpenReason, UiSettings, VideoDataUiModel
from tracksync.models.video_data import (
    LAZY_URL,
    NO_TRACK,
    ConfirmedTrack,
    MatchResult,
    RetrievalBatch,
    RetrievedSubtitleFile,
    SerializedSubtitleFile,
    SubtitleTrack,
    TrackRequest,
    VideoDataSnapshot,
    empty_track,
)

__all__ = [
    "NO_TRACK",
    "LAZY_URL",
    "SubtitleTrack",
    "ConfirmedTrack",
    "VideoDataSnapshot",
    "MatchResult",
    "RetrievedSubtitleFile",
    "SerializedSubtitleFile",
    "TrackRequest",
    "RetrievalBatch",
    "empty_track",
    "FailureReason",
    "PageState",
    "RawSiteInfo",
    "SiteInfo",
    "SiteExtractionFailure",
    "SiteExtractionResult",
    "OpenReason",
    "UiSettings",
    "VideoDataUiModel",
    "BridgeCommand",
    "OpenSettingsCommand",
    "ActiveProfileCommand",
    "ConfirmCommand",
    "OpenFileCommand",
    "UpdateEpisodeCommand",
    "SearchCommand",
]
