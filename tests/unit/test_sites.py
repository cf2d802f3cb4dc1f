"""Unit tests for the site catalog and its extraction strategies."""

import pytest

from tracksync.core.sites import (
    SITE_CATALOG,
    QueryParamStrategy,
    SelectorStrategy,
    SiteCatalog,
    TitleTagStrategy,
    normalize_hostname,
)
from tracksync.models.site import PageState


@pytest.mark.unit
class TestNormalizeHostname:
    def test_strips_www(self):
        assert normalize_hostname("https://www.miruro.tv/watch?id=1") == "miruro.tv"

    def test_keeps_subdomains(self):
        assert normalize_hostname("https://app.strem.io/#/player") == "app.strem.io"

    def test_invalid_url(self):
        assert normalize_hostname("not a url") == ""


@pytest.mark.unit
class TestStrategies:
    """Test per-site title/episode extraction."""

    def test_selector_strategy(self, hianime_url, hianime_html):
        strategy = SITE_CATALOG.lookup(hianime_url)

        raw = strategy.extract(PageState(url=hianime_url, html=hianime_html))

        assert isinstance(strategy, SelectorStrategy)
        assert raw.title == "Frieren: Beyond Journey's End"
        assert raw.episode_text == "5"

    def test_selector_strategy_missing_elements(self, hianime_url):
        strategy = SITE_CATALOG.lookup(hianime_url)

        raw = strategy.extract(PageState(url=hianime_url, html="<html></html>"))

        assert raw.title == ""
        assert raw.episode_text == ""

    def test_query_param_strategy(self):
        url = "https://www.miruro.tv/watch?id=154587&ep=12"
        html = '<div class="anime-title"><a>Frieren</a></div>'
        strategy = SITE_CATALOG.lookup(url)

        raw = strategy.extract(PageState(url=url, html=html))

        assert isinstance(strategy, QueryParamStrategy)
        assert raw.title == "Frieren"
        assert raw.episode_text == "12"
        assert raw.external_id == 154587

    def test_query_param_strategy_non_numeric_id(self):
        strategy = QueryParamStrategy(".t", "ep", "id", r".*")

        raw = strategy.extract(PageState(url="https://x.test/watch?id=abc&ep=1"))

        assert raw.external_id is None

    def test_title_tag_strategy(self):
        url = "https://app.strem.io/#/player/abc"
        html = """
        <html><head><title>Stremio - Frieren (1x07)</title></head>
        <body><div class="fallback ng-binding">Frieren</div></body></html>
        """
        strategy = SITE_CATALOG.lookup(url)

        raw = strategy.extract(PageState(url=url, html=html))

        assert isinstance(strategy, TitleTagStrategy)
        assert raw.title == "Frieren"
        assert raw.episode_text == "07"

    def test_title_tag_strategy_without_pattern_match(self):
        strategy = TitleTagStrategy(".t", r"(\d+)x(\d+)", r".*")

        raw = strategy.extract(PageState(url="https://x.test", html="<title>Home</title>"))

        assert raw.episode_text == ""


@pytest.mark.unit
class TestSiteCatalog:
    def test_registered_hosts(self):
        assert SITE_CATALOG.hostnames() == ["hianime.to", "miruro.tv", "app.strem.io"]

    def test_is_supported(self):
        assert SITE_CATALOG.is_supported("https://www.hianime.to/home")
        assert not SITE_CATALOG.is_supported("https://example.com/watch")

    def test_is_player_url(self, hianime_url):
        assert SITE_CATALOG.is_player_url(hianime_url)
        assert not SITE_CATALOG.is_player_url("https://hianime.to/home")
        assert not SITE_CATALOG.is_player_url("https://example.com/watch?ep=1")

    def test_register(self):
        catalog = SiteCatalog()
        strategy = SelectorStrategy("h1", ".ep", r"https://anime\.test/.+")

        catalog.register("anime.test", strategy)

        assert catalog.lookup("https://www.anime.test/x") is strategy
        assert catalog.hostnames() == ["anime.test"]
