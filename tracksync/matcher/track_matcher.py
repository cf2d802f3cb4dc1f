"""Track matcher - reconciles remembered languages with available tracks."""

from tracksync.models.video_data import NO_TRACK, MatchResult, SubtitleTrack, empty_track


class TrackMatcher:
    """Selects one track per remembered language slot.

    Matching is first-match-wins in the order tracks were detected. The same
    track may fill several slots when the user remembered the same language
    twice.
    """

    def __init__(self, empty: SubtitleTrack | None = None):
        self.empty = empty or empty_track("No subtitle")

    def match(self, preferences: list[str], available: list[SubtitleTrack]) -> MatchResult:
        """Match remembered languages against the available tracks.

        Args:
            preferences: One language per slot; NO_TRACK means "leave empty"
            available: Tracks detected for the current video, in page order

        Returns:
            MatchResult with one track per slot (empty sentinel where nothing
            matched) and whether every slot was satisfied
        """
        selected = [self.empty] * len(preferences)

        if not available and all(language == NO_TRACK for language in preferences):
            return MatchResult(auto_selected_tracks=selected, complete_match=True)

        matches = 0
        for slot, language in enumerate(preferences):
            if language == NO_TRACK:
                matches += 1
                continue

            for track in available:
                if track.language == language:
                    selected[slot] = track
                    matches += 1
                    break

        return MatchResult(
            auto_selected_tracks=selected,
            complete_match=matches == len(preferences),
        )
