import httpx
from playwright.sync_api import sync_playwright
from ..errors import CrawlError
from ..schemas import CrawlResult
from .extract import extract_title_and_text, MAX_CONTENT_CHARS

# Runs in the page; drops chrome around the copy and reads the visible text
_EXTRACT_MAIN_TEXT_JS = """() => {
  document.querySelectorAll('script, style, nav, footer').forEach(el => el.remove());
  const main = document.querySelector('main') || document.body;
  return main ? main.innerText : '';
}"""


def render_page(url: str, *, timeout_ms: int = 10000, user_agent: str) -> CrawlResult:
    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=True,
            args=[
                "--no-sandbox",
                "--disable-dev-shm-usage",
                "--disable-gpu",
            ],
        )
        try:
            context = browser.new_context(user_agent=user_agent, ignore_https_errors=True)
            page = context.new_page()
            response = page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            if response is not None and response.status >= 400:
                raise CrawlError(f"HTTP {response.status}")
            title = page.title() or ""
            content = page.evaluate(_EXTRACT_MAIN_TEXT_JS) or ""
        finally:
            browser.close()
    return CrawlResult(url=url, title=title.strip(), content=content[:MAX_CONTENT_CHARS])


def fetch_page(url: str, *, timeout_s: float = 15, user_agent: str) -> CrawlResult:
    with httpx.Client(follow_redirects=True, timeout=timeout_s) as client:
        r = client.get(url, headers={
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })
    if r.status_code >= 400:
        raise CrawlError(f"HTTP {r.status_code}")
    title, content = extract_title_and_text(r.text)
    return CrawlResult(url=url, title=title, content=content)
