from typing import Optional
from .config import Settings, get_settings
from .db import get_session_factory
from .errors import InvalidRequest, StoreError
from .ingestion.canonicalize import ensure_scheme, generate_fingerprint, normalize_url, validate_url
from .ingestion.crawler import crawl_website
from .analysis.analyzer import analyze_crawl
from .schemas import TIERS
from .store import list_public_analyses, lookup_analysis, store_analysis
from .utils.logging import get_logger

log = get_logger(__name__)


def analyze_url(url: Optional[str], tier: Optional[str], force: bool = False, *, settings: Optional[Settings] = None, SessionLocal=None) -> dict:
    settings = settings or get_settings()
    SessionLocal = SessionLocal or get_session_factory()

    if not url or not tier:
        raise InvalidRequest("URL and tier are required")
    if not validate_url(url):
        raise InvalidRequest("Invalid URL format")
    if tier not in TIERS:
        raise InvalidRequest("Invalid tier. Must be speedrun, mvp, or prod-lite")

    canonical_url = normalize_url(url)
    fingerprint = generate_fingerprint(canonical_url, tier)
    bypass_cache = settings.is_development and force is True

    if not bypass_cache:
        cached = lookup_analysis(SessionLocal, fingerprint)
        if cached is not None:
            log.info(f"Cache hit for {canonical_url} ({tier})")
            return cached

    log.info(f"Starting analysis for {canonical_url} ({tier}){' [force]' if bypass_cache else ''}")
    crawl_results = crawl_website(ensure_scheme(url), settings=settings)
    log.info(f"Crawled {len(crawl_results)} pages")

    result = analyze_crawl(crawl_results, tier, settings=settings)
    log.info(f"Analysis complete: {result['total_hours']} hours")

    try:
        store_analysis(
            SessionLocal,
            url=url,
            url_canonical=canonical_url,
            tier=tier,
            fingerprint=fingerprint,
            result=result,
        )
    except StoreError:
        # the caller still gets the fresh result
        log.exception("Database upsert error")

    return result


def list_analyses(limit: int = 10, search: Optional[str] = None, *, SessionLocal=None) -> list:
    return list_public_analyses(SessionLocal or get_session_factory(), limit=limit, search=search)
