"""Track matching and remote subtitle search."""

from tracksync.matcher.search_client import AnilistJimakuClient, SubtitleSearchClient
from tracksync.matcher.track_matcher import TrackMatcher

__all__ = ["TrackMatcher", "SubtitleSearchClient", "AnilistJimakuClient"]
