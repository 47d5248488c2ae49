import re
from bs4 import BeautifulSoup
from typing import Tuple

MAX_CONTENT_CHARS = 5000

_WS_RE = re.compile(r"\s+")


def extract_title_and_text(html: str) -> Tuple[str, str]:
    """Plain tag-stripping extraction used when the browser can't render a page."""
    soup = BeautifulSoup(html or "", "lxml")

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        og_title = soup.find("meta", attrs={"property": "og:title"}) or soup.find("meta", attrs={"name": "og:title"})
        if og_title and og_title.get("content"):
            title = og_title["content"].strip()

    for el in soup(["script", "style", "noscript"]):
        el.decompose()
    text = _WS_RE.sub(" ", soup.get_text(" ")).strip()

    return title, text[:MAX_CONTENT_CHARS]
