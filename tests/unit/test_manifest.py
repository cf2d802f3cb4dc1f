"""Unit tests for M3U8 manifest parsing."""

import pytest

from tracksync.core.manifest import is_hls_playlist, is_m3u8_url, parse_manifest

SUBTITLE_PLAYLIST = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-TARGETDURATION:10
#EXT-X-MEDIA-SEQUENCE:4
#EXTINF:10.0,
part0.vtt
#EXTINF:9.5,
part1.vtt
#EXT-X-DISCONTINUITY
#EXTINF:10.0,
ad.vtt
#EXTINF:4.0,
part2.vtt
#EXT-X-ENDLIST
"""


@pytest.mark.unit
class TestParseManifest:
    def test_segments_in_order(self):
        manifest = parse_manifest(SUBTITLE_PLAYLIST)

        assert [s.uri for s in manifest.segments] == [
            "part0.vtt",
            "part1.vtt",
            "ad.vtt",
            "part2.vtt",
        ]

    def test_durations_and_sequence(self):
        manifest = parse_manifest(SUBTITLE_PLAYLIST)

        assert manifest.media_sequence == 4
        assert manifest.segments[1].duration == 9.5

    def test_discontinuity_flags_following_segment_only(self):
        manifest = parse_manifest(SUBTITLE_PLAYLIST)

        assert [s.discontinuity for s in manifest.segments] == [False, False, True, False]

    def test_empty_playlist(self):
        manifest = parse_manifest("#EXTM3U\n#EXT-X-ENDLIST\n")

        assert manifest.segments == []

    def test_crlf_line_endings(self):
        manifest = parse_manifest("#EXTM3U\r\n#EXTINF:5,\r\nseg.vtt\r\n")

        assert [s.uri for s in manifest.segments] == ["seg.vtt"]


@pytest.mark.unit
class TestDetection:
    def test_is_hls_playlist(self):
        assert is_hls_playlist("  #EXTM3U\n")
        assert not is_hls_playlist("WEBVTT\n")

    def test_is_m3u8_url(self):
        assert is_m3u8_url("https://cdn.example.com/subs/index.m3u8")
        assert is_m3u8_url("https://cdn.example.com/subs/INDEX.M3U8?token=1")
        assert not is_m3u8_url("https://cdn.example.com/subs/en.vtt")
