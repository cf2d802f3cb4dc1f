"""Answers site identity queries from other contexts."""

import logging
from collections.abc import Callable
from typing import Any

from tracksync.core.site_resolver import SiteInfoResolver
from tracksync.core.sites import SITE_CATALOG, SiteCatalog
from tracksync.models.site import SiteExtractionFailure

logger = logging.getLogger(__name__)

CHECK_IF_ANIME_SITE = "CHECK_IF_ANIME_SITE"
GET_ANIME_TITLE_AND_EPISODE = "GET_ANIME_TITLE_AND_EPISODE"


class SiteIdentityService:
    """Serves ``CHECK_IF_ANIME_SITE`` and ``GET_ANIME_TITLE_AND_EPISODE``.

    ``url_source`` returns the URL of the current page; a message may carry
    its own ``url`` instead.
    """

    def __init__(
        self,
        resolver: SiteInfoResolver,
        url_source: Callable[[], str],
        catalog: SiteCatalog = SITE_CATALOG,
    ):
        self._resolver = resolver
        self._url_source = url_source
        self._catalog = catalog

    async def handle(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """Answer one query; returns None for commands this service does not own."""
        command = message.get("command")
        url = message.get("url") or self._url_source()

        if command == CHECK_IF_ANIME_SITE:
            return {"isAnimeSite": self._catalog.is_supported(url)}

        if command == GET_ANIME_TITLE_AND_EPISODE:
            result = await self._resolver.resolve(url)
            if isinstance(result, SiteExtractionFailure):
                return {
                    "error": result.error,
                    "currentSite": result.current_site,
                    "animeSites": result.supported_sites,
                }
            response = {"title": result.title, "episode": result.episode}
            if result.external_id is not None:
                response["anilistId"] = result.external_id
            return response

        logger.debug(f"Ignoring site identity command: {command}")
        return None
