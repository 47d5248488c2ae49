from typing import List, Optional
from urllib.parse import urlsplit
from ..config import Settings, get_settings
from ..schemas import CrawlResult
from ..utils.logging import get_logger
from .fetch import render_page, fetch_page

log = get_logger(__name__)

# Pages that usually describe what a product does
EXTRA_PATHS = (
    "/features",
    "/pricing",
    "/docs",
    "/help",
    "/about",
    "/how-it-works",
)
MIN_EXTRA_PAGE_CHARS = 100
MAX_PAGES = 5


def crawl_single_page(url: str, settings: Settings) -> CrawlResult:
    try:
        return render_page(url, timeout_ms=settings.crawl_timeout_ms, user_agent=settings.user_agent)
    except Exception as render_error:
        log.info(f"Browser render failed for {url}, falling back to plain fetch: {render_error}")
        try:
            return fetch_page(url, timeout_s=settings.fetch_timeout_s, user_agent=settings.user_agent)
        except Exception as fetch_error:
            log.warning(f"Plain fetch failed for {url}: {fetch_error}")
            return CrawlResult(url=url, title="", content="", error=f"Failed to crawl: {render_error}")


def crawl_website(url: str, settings: Optional[Settings] = None) -> List[CrawlResult]:
    """Crawl the page at ``url`` plus a few well-known product pages.

    The primary page always comes first. If it can't be fetched the crawl
    stops there and the single error-carrying result is returned. Extra
    pages that fail or carry almost no text are skipped.
    """
    settings = settings or get_settings()
    main_result = crawl_single_page(url, settings)
    results = [main_result]
    if main_result.error:
        return results

    parts = urlsplit(url)
    origin = f"{parts.scheme}://{parts.netloc}"
    for path in EXTRA_PATHS:
        if len(results) >= MAX_PAGES:
            break
        result = crawl_single_page(f"{origin}{path}", settings)
        if not result.error and len(result.content) > MIN_EXTRA_PAGE_CHARS:
            results.append(result)

    return results[:MAX_PAGES]
