from unittest.mock import MagicMock, patch

import httpx
import pytest
from playwright.sync_api import Error as PlaywrightError

from clonetime.errors import CrawlError
from clonetime.ingestion import crawler
from clonetime.ingestion.crawler import EXTRA_PATHS, MAX_PAGES, crawl_single_page, crawl_website
from clonetime.ingestion.extract import MAX_CONTENT_CHARS, extract_title_and_text
from clonetime.ingestion.fetch import fetch_page, render_page

from conftest import make_page

LONG_TEXT = "This product helps teams plan work. " * 10


class TestCrawlSinglePage:
    def test_uses_browser_first(self, settings):
        with patch.object(crawler, "render_page", return_value=make_page(content="rendered")) as render, \
                patch.object(crawler, "fetch_page") as fetch:
            result = crawl_single_page("https://example.com", settings)
        assert result.content == "rendered"
        render.assert_called_once()
        fetch.assert_not_called()

    def test_falls_back_to_plain_fetch(self, settings):
        with patch.object(crawler, "render_page", side_effect=PlaywrightError("Timeout 1000ms exceeded")), \
                patch.object(crawler, "fetch_page", return_value=make_page(content="static")) as fetch:
            result = crawl_single_page("https://example.com", settings)
        assert result.content == "static"
        assert result.error is None
        fetch.assert_called_once_with("https://example.com", timeout_s=1, user_agent=settings.user_agent)

    @pytest.mark.parametrize("fetch_error", [CrawlError("HTTP 500"), httpx.ConnectError("refused")])
    def test_both_strategies_fail(self, settings, fetch_error):
        with patch.object(crawler, "render_page", side_effect=PlaywrightError("browser missing")), \
                patch.object(crawler, "fetch_page", side_effect=fetch_error):
            result = crawl_single_page("https://example.com", settings)
        assert result.content == ""
        assert result.title == ""
        assert result.error.startswith("Failed to crawl")

    @pytest.mark.parametrize("fetch_error", [
        ValueError("bad url"),
        UnicodeError("label too long"),
        httpx.InvalidURL("Invalid non-printable ASCII character in URL"),
    ])
    def test_unexpected_fetch_errors_become_error_result(self, settings, fetch_error):
        with patch.object(crawler, "render_page", side_effect=PlaywrightError("browser missing")), \
                patch.object(crawler, "fetch_page", side_effect=fetch_error):
            result = crawl_single_page("https://example.com", settings)
        assert result.url == "https://example.com"
        assert result.content == ""
        assert result.error == "Failed to crawl: browser missing"

    def test_unexpected_render_error_falls_back(self, settings):
        with patch.object(crawler, "render_page", side_effect=OSError("chromium exited")), \
                patch.object(crawler, "fetch_page", return_value=make_page(content="static")) as fetch:
            result = crawl_single_page("https://example.com", settings)
        assert result.content == "static"
        fetch.assert_called_once()


class TestCrawlWebsite:
    def test_unexpected_errors_do_not_escape(self, settings):
        with patch.object(crawler, "render_page", side_effect=RuntimeError("no browser")), \
                patch.object(crawler, "fetch_page", side_effect=UnicodeError("encoding with 'idna' codec failed")):
            results = crawl_website("https://example.com", settings)
        assert len(results) == 1
        assert results[0].error == "Failed to crawl: no browser"

    def test_extra_page_errors_are_skipped(self, settings):
        def fake_fetch(url, **_kwargs):
            if url == "https://example.com":
                return make_page(content=LONG_TEXT)
            raise ValueError(f"cannot fetch {url}")

        with patch.object(crawler, "render_page", side_effect=PlaywrightError("browser missing")), \
                patch.object(crawler, "fetch_page", side_effect=fake_fetch):
            results = crawl_website("https://example.com", settings)
        assert [r.url for r in results] == ["https://example.com"]

    def test_primary_failure_short_circuits(self, settings):
        failed = make_page(error="Failed to crawl: boom")
        with patch.object(crawler, "crawl_single_page", return_value=failed) as single:
            results = crawl_website("https://example.com", settings)
        assert results == [failed]
        single.assert_called_once()

    def test_caps_at_five_pages(self, settings):
        def fake(url, _settings):
            return make_page(url=url, content=LONG_TEXT)

        with patch.object(crawler, "crawl_single_page", side_effect=fake) as single:
            results = crawl_website("https://example.com/app", settings)

        assert len(results) == MAX_PAGES
        assert results[0].url == "https://example.com/app"
        assert [r.url for r in results[1:]] == [f"https://example.com{p}" for p in EXTRA_PATHS[:4]]
        assert single.call_count == MAX_PAGES

    def test_skips_failed_and_thin_pages(self, settings):
        pages = {
            "https://example.com": make_page(content=LONG_TEXT),
            "https://example.com/features": make_page(url="https://example.com/features", error="Failed to crawl: 404"),
            "https://example.com/pricing": make_page(url="https://example.com/pricing", content="Contact us"),
            "https://example.com/docs": make_page(url="https://example.com/docs", content="x" * 100),
            "https://example.com/help": make_page(url="https://example.com/help", content=LONG_TEXT),
        }

        def fake(url, _settings):
            return pages.get(url, make_page(url=url, error="Failed to crawl: nope"))

        with patch.object(crawler, "crawl_single_page", side_effect=fake):
            results = crawl_website("https://example.com", settings)

        assert [r.url for r in results] == ["https://example.com", "https://example.com/help"]

    def test_extra_paths_use_origin(self, settings):
        seen = []

        def fake(url, _settings):
            seen.append(url)
            return make_page(url=url, content="short")

        with patch.object(crawler, "crawl_single_page", side_effect=fake):
            crawl_website("http://Example.com:8080/some/deep/page?x=1", settings)

        assert seen[1] == "http://Example.com:8080/features"


class TestExtract:
    def test_strips_tags_scripts_and_styles(self):
        html = """<html><head><title> Acme </title><style>body{color:red}</style></head>
        <body><script>var x = 1;</script><h1>Build   faster</h1><p>with <b>Acme</b></p></body></html>"""
        title, text = extract_title_and_text(html)
        assert title == "Acme"
        assert text == "Acme Build faster with Acme"

    def test_og_title_when_no_title_tag(self):
        title, _ = extract_title_and_text('<html><head><meta property="og:title" content="OG Name"></head></html>')
        assert title == "OG Name"

    def test_truncates(self):
        _, text = extract_title_and_text("<p>" + "a" * 9000 + "</p>")
        assert len(text) == MAX_CONTENT_CHARS


class TestFetchPage:
    def _client(self, response):
        client = MagicMock()
        client.__enter__.return_value = client
        client.get.return_value = response
        return client

    def test_returns_extracted_page(self):
        response = httpx.Response(200, text="<title>Acme</title><p>Hello</p>")
        with patch("clonetime.ingestion.fetch.httpx.Client", return_value=self._client(response)):
            result = fetch_page("https://example.com", user_agent="ua")
        assert result.title == "Acme"
        assert "Hello" in result.content

    def test_http_error_status_raises(self):
        response = httpx.Response(503, text="down")
        with patch("clonetime.ingestion.fetch.httpx.Client", return_value=self._client(response)):
            with pytest.raises(CrawlError, match="HTTP 503"):
                fetch_page("https://example.com", user_agent="ua")


class TestRenderPage:
    def _playwright(self, status=200, title="Acme", text="Rendered copy"):
        pw = MagicMock()
        manager = MagicMock()
        manager.__enter__.return_value = pw
        browser = pw.chromium.launch.return_value
        page = browser.new_context.return_value.new_page.return_value
        page.goto.return_value = MagicMock(status=status)
        page.title.return_value = title
        page.evaluate.return_value = text
        return manager, browser, page

    def test_returns_rendered_text(self):
        manager, browser, page = self._playwright(text="y" * 6000)
        with patch("clonetime.ingestion.fetch.sync_playwright", return_value=manager):
            result = render_page("https://example.com", timeout_ms=500, user_agent="ua")
        assert result.title == "Acme"
        assert len(result.content) == MAX_CONTENT_CHARS
        page.goto.assert_called_once_with("https://example.com", wait_until="networkidle", timeout=500)
        browser.close.assert_called_once()

    def test_error_status_raises_and_closes_browser(self):
        manager, browser, _ = self._playwright(status=404)
        with patch("clonetime.ingestion.fetch.sync_playwright", return_value=manager):
            with pytest.raises(CrawlError, match="HTTP 404"):
                render_page("https://example.com/features", user_agent="ua")
        browser.close.assert_called_once()

    def test_error_status_falls_back_to_fetch(self, settings):
        with patch.object(crawler, "render_page", side_effect=CrawlError("HTTP 404")), \
                patch.object(crawler, "fetch_page", side_effect=CrawlError("HTTP 404")):
            result = crawl_single_page("https://example.com/features", settings)
        assert result.error == "Failed to crawl: HTTP 404"
