"""Unit tests for TrackMatcher."""

import pytest

from tracksync.matcher.track_matcher import TrackMatcher
from tracksync.models.video_data import NO_TRACK, SubtitleTrack, empty_track


@pytest.fixture
def matcher():
    return TrackMatcher(empty_track("No subtitle"))


def make_track(track_id: str, language: str | None) -> SubtitleTrack:
    return SubtitleTrack(
        id=track_id,
        language=language,
        url=f"https://subs.example.com/{track_id}.vtt",
        label=track_id,
        extension="vtt",
    )


@pytest.mark.unit
class TestTrackMatcher:
    """Test remembered-language matching."""

    def test_empty_preferences_and_tracks_is_complete(self, matcher):
        """Nothing remembered and nothing available is a complete match."""
        result = matcher.match([], [])

        assert result.complete_match is True
        assert result.auto_selected_tracks == []

    def test_sentinel_only_preferences_with_no_tracks(self, matcher):
        result = matcher.match([NO_TRACK, NO_TRACK], [])

        assert result.complete_match is True
        assert [t.url for t in result.auto_selected_tracks] == [NO_TRACK, NO_TRACK]

    def test_language_match_selects_track(self, matcher, english_track, japanese_track):
        result = matcher.match(["ja"], [english_track, japanese_track])

        assert result.complete_match is True
        assert result.auto_selected_tracks == [japanese_track]

    def test_first_match_wins(self, matcher):
        """The first detected track of a language is chosen."""
        first = make_track("en-a", "en")
        second = make_track("en-b", "en")

        result = matcher.match(["en"], [first, second])

        assert result.auto_selected_tracks[0].id == "en-a"

    def test_same_track_may_fill_several_slots(self, matcher, english_track):
        result = matcher.match(["en", "en"], [english_track])

        assert result.complete_match is True
        assert result.auto_selected_tracks == [english_track, english_track]

    def test_missing_language_is_incomplete(self, matcher, english_track):
        result = matcher.match(["en", "ja"], [english_track])

        assert result.complete_match is False
        assert result.auto_selected_tracks[0] == english_track
        assert result.auto_selected_tracks[1].is_empty

    def test_sentinel_slot_counts_as_match(self, matcher, english_track):
        """A deliberate "no track" slot is satisfied without consuming a track."""
        result = matcher.match([NO_TRACK, "en"], [english_track])

        assert result.complete_match is True
        assert result.auto_selected_tracks[0].is_empty
        assert result.auto_selected_tracks[1] == english_track

    def test_sentinel_preference_with_tracks_available(self, matcher, english_track):
        result = matcher.match([NO_TRACK], [english_track])

        assert result.complete_match is True
        assert result.auto_selected_tracks[0].is_empty

    def test_tracks_without_preferences_is_complete(self, matcher, english_track):
        result = matcher.match([], [english_track])

        assert result.complete_match is True
        assert result.auto_selected_tracks == []

    def test_track_without_language_never_matches(self, matcher):
        result = matcher.match(["en"], [make_track("unknown", None)])

        assert result.complete_match is False

    def test_cardinality_follows_preferences(self, matcher, english_track):
        result = matcher.match(["en", "fr", "de", "ja"], [english_track])

        assert len(result.auto_selected_tracks) == 4

    def test_default_empty_track_label(self):
        result = TrackMatcher().match(["fr"], [])

        assert result.auto_selected_tracks[0].label == "No subtitle"
        assert result.complete_match is False

    def test_missing_first_language_with_sentinel_and_match(self, matcher, japanese_track):
        """["en", "-", "ja"] against only a Japanese track."""
        result = matcher.match(["en", NO_TRACK, "ja"], [japanese_track])

        assert result.complete_match is False
        assert result.auto_selected_tracks[0].is_empty
        assert result.auto_selected_tracks[1].is_empty
        assert result.auto_selected_tracks[2] == japanese_track
