"""Site info resolver - identifies title and episode on a supported page.

Pages often render their title/episode asynchronously after navigation, so a
failed extraction is retried a bounded number of times with a fixed delay.
An unsupported host fails immediately: waiting cannot register a strategy.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

import httpx

from tracksync.config import Settings, settings as default_settings
from tracksync.core.errors import ChannelError
from tracksync.core.sites import SITE_CATALOG, SiteCatalog, normalize_hostname
from tracksync.models.site import (
    FailureReason,
    PageState,
    SiteExtractionFailure,
    SiteExtractionResult,
    SiteInfo,
)

logger = logging.getLogger(__name__)

PageSource = Callable[[], Awaitable[PageState]]
Sleep = Callable[[float], Awaitable[None]]

UNSUPPORTED_SITE_MESSAGE = "Unsupported website."
DETECTION_TIMEOUT_MESSAGE = "Couldn't identify the correct Anime Title and Episode."

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# A page source failing with these counts as a poll that is not ready yet
_PAGE_ERRORS = (httpx.HTTPError, ChannelError)


def parse_episode(text: str) -> int | None:
    """Parse leading digits like ``parseInt``: "12 - Name" -> 12, "0" -> 0.

    Returns None when the text does not start with a number.
    """
    match = _LEADING_INT.match(text or "")
    return int(match.group(1)) if match else None


def http_page_source(client: httpx.AsyncClient, url: str) -> PageSource:
    """Build a page source that re-fetches ``url`` on every poll."""

    async def fetch() -> PageState:
        response = await client.get(url)
        return PageState(url=str(response.url), html=response.text)

    return fetch


class SiteInfoResolver:
    """Polls a page source until the site's strategy yields title and episode."""

    def __init__(
        self,
        page_source: PageSource,
        catalog: SiteCatalog = SITE_CATALOG,
        sleep: Sleep = asyncio.sleep,
        config: Settings | None = None,
    ):
        self._page_source = page_source
        self._catalog = catalog
        self._sleep = sleep
        self._config = config or default_settings

    async def resolve(
        self,
        url: str,
        max_retries: int | None = None,
        delay: float | None = None,
    ) -> SiteExtractionResult:
        """Identify the title and episode shown at ``url``.

        Args:
            url: Page URL; its hostname selects the strategy
            max_retries: Extra polls after the first (default from settings)
            delay: Seconds between polls (default from settings)

        Returns:
            SiteInfo on success, SiteExtractionFailure otherwise
        """
        if max_retries is None:
            max_retries = self._config.site_detection_max_retries
        if delay is None:
            delay = self._config.site_detection_delay

        current_site = normalize_hostname(url)
        strategy = self._catalog.lookup(url)

        if strategy is None:
            logger.info(f"No extraction strategy for {current_site}")
            return SiteExtractionFailure(
                reason=FailureReason.UNSUPPORTED_SITE,
                error=UNSUPPORTED_SITE_MESSAGE,
                current_site=current_site,
                supported_sites=self._catalog.hostnames(),
            )

        for attempt in range(max_retries + 1):
            try:
                page = await self._page_source()
            except _PAGE_ERRORS as e:
                logger.warning(f"Page fetch failed on {current_site}: {e}")
                raw = None
            else:
                raw = strategy.extract(page)
            episode = parse_episode(raw.episode_text) if raw else None

            if raw and raw.title and episode is not None:
                logger.info(
                    f"Identified '{raw.title}' episode {episode} on {current_site} "
                    f"(attempt {attempt + 1})"
                )
                return SiteInfo(title=raw.title, episode=episode, external_id=raw.external_id)

            if attempt < max_retries:
                logger.debug(
                    f"Title/episode not ready on {current_site}, "
                    f"retry {attempt + 1}/{max_retries} in {delay}s"
                )
                await self._sleep(delay)

        logger.warning(f"Gave up identifying title/episode on {current_site}")
        return SiteExtractionFailure(
            reason=FailureReason.DETECTION_TIMEOUT,
            error=DETECTION_TIMEOUT_MESSAGE,
            current_site=current_site,
            supported_sites=self._catalog.hostnames(),
        )
