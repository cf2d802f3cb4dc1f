"""Site catalog - per-site title/episode extraction strategies.

Each supported site registers one strategy under its normalized hostname.
Strategies read a ``PageState`` (URL plus rendered HTML) and return raw,
unvalidated text; validation and retrying belong to the resolver.
"""

import abc
import re
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup

from tracksync.models.site import PageState, RawSiteInfo


def normalize_hostname(url: str) -> str:
    """Return the URL's hostname without a leading ``www.``."""
    hostname = urlparse(url).hostname or ""
    return re.sub(r"^www\.", "", hostname)


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    if not selector:
        return ""
    element = soup.select_one(selector)
    return element.get_text().strip() if element else ""


class SiteStrategy(abc.ABC):
    """Extracts ``RawSiteInfo`` from the current page of one site."""

    def __init__(self, player_url_pattern: str):
        self.player_url_pattern = re.compile(player_url_pattern)

    def is_player_url(self, url: str) -> bool:
        return bool(self.player_url_pattern.match(url))

    @abc.abstractmethod
    def extract(self, page: PageState) -> RawSiteInfo:
        pass


class SelectorStrategy(SiteStrategy):
    """Title and episode both read from DOM elements."""

    def __init__(self, title_selector: str, episode_selector: str, player_url_pattern: str):
        super().__init__(player_url_pattern)
        self.title_selector = title_selector
        self.episode_selector = episode_selector

    def extract(self, page: PageState) -> RawSiteInfo:
        soup = BeautifulSoup(page.html, "html.parser")
        return RawSiteInfo(
            title=_select_text(soup, self.title_selector),
            episode_text=_select_text(soup, self.episode_selector),
        )


class QueryParamStrategy(SiteStrategy):
    """Title from the DOM; episode and external id from the query string."""

    def __init__(
        self,
        title_selector: str,
        episode_param: str,
        id_param: str | None,
        player_url_pattern: str,
    ):
        super().__init__(player_url_pattern)
        self.title_selector = title_selector
        self.episode_param = episode_param
        self.id_param = id_param

    def extract(self, page: PageState) -> RawSiteInfo:
        soup = BeautifulSoup(page.html, "html.parser")
        params = parse_qs(urlparse(page.url).query)
        episode = params.get(self.episode_param, [""])[0]

        external_id = None
        if self.id_param:
            raw_id = params.get(self.id_param, [""])[0]
            if raw_id.isdigit():
                external_id = int(raw_id)

        return RawSiteInfo(
            title=_select_text(soup, self.title_selector),
            episode_text=episode,
            external_id=external_id,
        )


class TitleTagStrategy(SiteStrategy):
    """Title from the DOM; episode from a pattern over the <title> tag.

    The episode is the second capture group, e.g. ``(\\d+)x(\\d+)`` on
    "Stremio - Show - Episode Name (1x05)".
    """

    def __init__(self, title_selector: str, pattern: str, player_url_pattern: str):
        super().__init__(player_url_pattern)
        self.title_selector = title_selector
        self.pattern = re.compile(pattern)

    def extract(self, page: PageState) -> RawSiteInfo:
        soup = BeautifulSoup(page.html, "html.parser")
        title_tag = soup.find("title")
        title_text = title_tag.get_text() if title_tag else ""

        episode = ""
        match = self.pattern.search(title_text)
        if match and match.group(2):
            episode = match.group(2)

        return RawSiteInfo(
            title=_select_text(soup, self.title_selector),
            episode_text=episode,
        )


class SiteCatalog:
    """Registry of extraction strategies keyed by normalized hostname."""

    def __init__(self, strategies: dict[str, SiteStrategy] | None = None):
        self._strategies: dict[str, SiteStrategy] = dict(strategies or {})

    def register(self, hostname: str, strategy: SiteStrategy) -> None:
        self._strategies[hostname] = strategy

    def lookup(self, url: str) -> SiteStrategy | None:
        return self._strategies.get(normalize_hostname(url))

    def is_supported(self, url: str) -> bool:
        return normalize_hostname(url) in self._strategies

    def is_player_url(self, url: str) -> bool:
        strategy = self.lookup(url)
        return strategy is not None and strategy.is_player_url(url)

    def hostnames(self) -> list[str]:
        return list(self._strategies.keys())


SITE_CATALOG = SiteCatalog(
    {
        "hianime.to": SelectorStrategy(
            title_selector="h2.film-name > a",
            episode_selector=".ssl-item.ep-item.active",
            player_url_pattern=r"https://hianime\.to/watch/.+\?ep=.+",
        ),
        "miruro.tv": QueryParamStrategy(
            title_selector=".anime-title > a",
            episode_param="ep",
            id_param="id",
            player_url_pattern=r"https://www\.miruro\.tv/watch\?id=.+ep=.+",
        ),
        "app.strem.io": TitleTagStrategy(
            title_selector=".fallback.ng-binding",
            pattern=r"(\d+)x(\d+)",
            player_url_pattern=r"https://app\.strem\.io/.+",
        ),
    }
)
