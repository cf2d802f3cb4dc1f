"""Commands sent by the picker UI over the bridge.

Each command is discriminated by its ``command`` tag; anything else is
ignored by the bridge.
"""

from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from tracksync.models.base import WireModel
from tracksync.models.video_data import ConfirmedTrack, SerializedSubtitleFile


class OpenSettingsCommand(WireModel):
    command: Literal["open-settings"] = "open-settings"


class ActiveProfileCommand(WireModel):
    command: Literal["active-profile"] = "active-profile"
    profile: str | None = None


class ConfirmCommand(WireModel):
    """User picked tracks, optionally asking to remember the languages."""

    command: Literal["confirm"] = "confirm"
    data: list[ConfirmedTrack]
    should_remember_track_choices: bool = False
    sync_with_asbplayer_id: str | None = None


class OpenFileCommand(WireModel):
    """User supplied local subtitle files, bypassing retrieval."""

    command: Literal["open-file"] = "open-file"
    subtitles: list[SerializedSubtitleFile]


class UpdateEpisodeCommand(WireModel):
    command: Literal["update-episode"] = "update-episode"
    episode: int | None = None


class SearchCommand(WireModel):
    command: Literal["search"] = "search"
    title: str
    episode: int | None = None


BridgeCommand = Annotated[
    OpenSettingsCommand
    | ActiveProfileCommand
    | ConfirmCommand
    | OpenFileCommand
    | UpdateEpisodeCommand
    | SearchCommand,
    Field(discriminator="command"),
]

bridge_command_adapter: TypeAdapter[BridgeCommand] = TypeAdapter(BridgeCommand)

KNOWN_COMMANDS = frozenset(
    {"open-settings", "active-profile", "confirm", "open-file", "update-episode", "search"}
)
