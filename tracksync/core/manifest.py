"""
HLS (M3U8) media playlist parsing.

Only what segmented subtitle retrieval needs: the ordered segment URIs and
which of them follow a discontinuity tag.
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class ManifestSegment:
    """One media segment of a playlist."""
    uri: str
    duration: float | None = None
    discontinuity: bool = False


@dataclass
class Manifest:
    """Parsed media playlist."""
    segments: list[ManifestSegment] = field(default_factory=list)
    media_sequence: int | None = None


def is_hls_playlist(content: str) -> bool:
    """
    Check if content is an HLS playlist (M3U8 format).

    Args:
        content: Content to check

    Returns:
        True if content is HLS playlist, False otherwise
    """
    return content.strip().startswith("#EXTM3U")


def is_m3u8_url(url: str) -> bool:
    """
    Check if a URL points to an M3U8 playlist.

    Args:
        url: URL to check

    Returns:
        True if URL appears to be an M3U8 playlist, False otherwise
    """
    return url.lower().endswith(".m3u8") or ".m3u8?" in url.lower()


def parse_manifest(content: str) -> Manifest:
    """
    Parse an M3U8 media playlist into its segments.

    ``#EXT-X-DISCONTINUITY`` marks the segment that follows it. Master
    playlists are not resolved; their variant URIs come back as segments.

    Args:
        content: Playlist text

    Returns:
        Manifest with segments in playlist order

    Example:
        >>> manifest = parse_manifest("#EXTM3U\\n#EXTINF:5.0,\\npart0.vtt\\n")
        >>> manifest.segments[0].uri
        'part0.vtt'
    """
    manifest = Manifest()
    pending_duration = None
    pending_discontinuity = False

    for line in content.split("\n"):
        line = line.strip()
        if not line:
            continue

        if line.startswith("#EXT-X-MEDIA-SEQUENCE:"):
            try:
                manifest.media_sequence = int(line.split(":", 1)[1].strip())
            except ValueError:
                logger.debug(f"Ignoring malformed media sequence: {line}")
        elif line.startswith("#EXTINF:"):
            duration_str = line.split(":", 1)[1].split(",")[0].strip()
            try:
                pending_duration = float(duration_str)
            except ValueError:
                pending_duration = None
        elif line.startswith("#EXT-X-DISCONTINUITY") and not line.startswith("#EXT-X-DISCONTINUITY-"):
            pending_discontinuity = True
        elif line.startswith("#"):
            continue
        else:
            manifest.segments.append(
                ManifestSegment(
                    uri=line,
                    duration=pending_duration,
                    discontinuity=pending_discontinuity,
                )
            )
            pending_duration = None
            pending_discontinuity = False

    return manifest
