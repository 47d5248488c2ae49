from typing import Any, Dict, Optional, Sequence
from ..config import Settings, get_settings
from ..errors import LLMError
from ..schemas import CrawlResult
from ..utils.logging import get_logger
from .estimate import apply_hint_filter, cap_total_hours, fallback_analysis
from .hints import compute_hints
from .openai_client import call_openai, parse_analysis

log = get_logger(__name__)


def analyze_crawl(crawl_results: Sequence[CrawlResult], tier: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Estimate build hours for the crawled pages.

    Never raises on model trouble: any LLMError is replaced by the static
    per-tier estimate. Both paths go through the hint filter, so the
    returned ``total_hours`` always matches the returned missions.
    """
    settings = settings or get_settings()
    hints = compute_hints(crawl_results)
    log.info(f"Hints for {tier}: {hints.as_dict()}")

    try:
        raw = call_openai(crawl_results, tier, hints, settings)
        result = cap_total_hours(parse_analysis(raw, tier))
    except LLMError as e:
        log.warning(f"OpenAI analysis error, using fallback estimate: {e}")
        result = fallback_analysis(crawl_results, tier, hints)

    return apply_hint_filter(result, hints).model_dump()
