"""Subtitle track and retrieval data models."""

import base64

from pydantic import BaseModel, ConfigDict

from tracksync.models.base import WireModel

# Reserved values of SubtitleTrack.url / .language
NO_TRACK = "-"  # User wants nothing in this slot
LAZY_URL = "lazy"  # Content must be requested from the page layer on demand
MANIFEST_EXTENSION = "m3u8"


class SubtitleTrack(WireModel):
    """One candidate subtitle source detected for the current video."""

    model_config = ConfigDict(frozen=True)

    id: str
    language: str | None = None
    url: str
    label: str
    extension: str
    is_local_file: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self.url == NO_TRACK

    @property
    def is_lazy(self) -> bool:
        return self.url == LAZY_URL


def empty_track(label: str, extension: str = "srt") -> SubtitleTrack:
    """Build the sentinel track that stands for "no subtitle in this slot"."""
    return SubtitleTrack(
        id=NO_TRACK,
        language=NO_TRACK,
        url=NO_TRACK,
        label=label,
        extension=extension,
    )


class ConfirmedTrack(SubtitleTrack):
    """A track the user confirmed in the picker, with its output name."""

    name: str


class VideoDataSnapshot(WireModel):
    """Subtitle choices detected on the current page.

    ``subtitles is None`` means the page layer is still loading; an empty list
    means loading finished and nothing was found.
    """

    basename: str = ""
    subtitles: list[SubtitleTrack] | None = None
    error: str | None = None


class MatchResult(BaseModel):
    """Outcome of reconciling remembered languages with available tracks."""

    auto_selected_tracks: list[SubtitleTrack]
    complete_match: bool


class RetrievedSubtitleFile(BaseModel):
    """A named subtitle payload, consumed downstream as opaque bytes."""

    model_config = ConfigDict(frozen=True)

    name: str
    payload: bytes = b""


class SerializedSubtitleFile(WireModel):
    """Wire form of a subtitle file supplied directly by the picker."""

    name: str
    base64: str = ""

    def decode(self) -> RetrievedSubtitleFile:
        """Decode the payload; raises ``binascii.Error`` on malformed input."""
        payload = base64.b64decode(self.base64, validate=True) if self.base64 else b""
        return RetrievedSubtitleFile(name=self.name, payload=payload)


class TrackRequest(BaseModel):
    """One logical retrieval request."""

    name: str
    language: str | None = None
    extension: str
    url: str
    is_local_file: bool = False

    @property
    def is_manifest(self) -> bool:
        return self.extension == MANIFEST_EXTENSION


class RetrievalBatch(BaseModel):
    """Files retrieved for a whole confirm or auto-sync attempt.

    ``flatten`` tells the consumer that segmented tracks were involved, so
    like-named parts form one logical subtitle.
    """

    files: list[RetrievedSubtitleFile] = []
    flatten: bool = False
