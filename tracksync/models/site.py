"""Site identification models."""

from dataclasses import dataclass
from enum import Enum

from tracksync.models.base import WireModel


class FailureReason(str, Enum):
    """Why a page could not be identified."""

    UNSUPPORTED_SITE = "unsupported_site"  # No strategy registered, never retried
    DETECTION_TIMEOUT = "detection_timeout"  # Retry budget exhausted


@dataclass(frozen=True)
class PageState:
    """Snapshot of a page as seen by an extraction strategy."""

    url: str
    html: str = ""


@dataclass(frozen=True)
class RawSiteInfo:
    """Unvalidated strategy output; episode is still text."""

    title: str = ""
    episode_text: str = ""
    external_id: int | None = None


class SiteInfo(WireModel):
    """Successfully identified title and episode."""

    title: str
    episode: int
    external_id: int | None = None


class SiteExtractionFailure(WireModel):
    """Typed failure of site identification."""

    reason: FailureReason
    error: str
    current_site: str | None = None
    supported_sites: list[str] = []


SiteExtractionResult = SiteInfo | SiteExtractionFailure
