import re
from typing import Iterable, List
from ..schemas import (
    AnalysisResult,
    CrawlResult,
    Evidence,
    Mission,
    ProductMap,
    UserStory,
    TIER_DESCRIPTIONS,
    TIER_MARKERS,
)
from .hints import Hints

MAX_TOTAL_HOURS = 48
MIN_TOTAL_HOURS = 1

FALLBACK_TOTAL_HOURS = {
    "speedrun": 4,
    "mvp": 8,
    "prod-lite": 16,
}

FALLBACK_CONFIDENCE = 0.5
EVIDENCE_SNIPPET_CHARS = 100

# (category, title, weight, hint the mission depends on)
FALLBACK_MISSIONS = (
    ("Content", "Landing and marketing pages", 3, None),
    ("Data", "Core data model and CRUD screens", 3, None),
    ("Accounts", "Sign-up, login and sessions", 2, "has_auth"),
    ("Admin", "Admin dashboard", 1, "has_admin"),
    ("API", "Public API endpoints", 1, "mentions_api"),
    ("Media", "Project gallery and media handling", 2, "is_portfolio_like"),
)

ACCOUNTS_TITLE_RE = re.compile(
    r"\b(auth\w*|log[ -]?in|sign[ -]?(up|in)|accounts?|passwords?|registration|user management)\b", re.I
)
ADMIN_TITLE_RE = re.compile(r"\b(admin\w*|back[ -]?office|moderation)\b", re.I)
API_TITLE_RE = re.compile(r"\b(apis?|webhooks?|sdks?)\b", re.I)


def clamp_total_hours(hours: float) -> float:
    return max(MIN_TOTAL_HOURS, min(MAX_TOTAL_HOURS, hours))


def cap_total_hours(result: AnalysisResult) -> AnalysisResult:
    return result.model_copy(update={"total_hours": min(result.total_hours, MAX_TOTAL_HOURS)})


def _is_suppressed(mission: Mission, hints: Hints) -> bool:
    if not hints.has_auth and (mission.category == "Accounts" or ACCOUNTS_TITLE_RE.search(mission.title)):
        return True
    if not hints.has_admin and (mission.category == "Admin" or ADMIN_TITLE_RE.search(mission.title)):
        return True
    if not hints.mentions_api and (mission.category == "API" or API_TITLE_RE.search(mission.title)):
        return True
    return False


def apply_hint_filter(result: AnalysisResult, hints: Hints) -> AnalysisResult:
    """Drop missions the crawled site gives no evidence for and re-total.

    ``total_hours`` becomes the sum of the kept missions, clamped to
    [1, 48]. If nothing is left to sum, the incoming total is clamped
    instead.
    """
    missions = [m for m in result.missions if not _is_suppressed(m, hints)]
    total = sum(m.hours for m in missions)
    if total == 0:
        total = result.total_hours
    return result.model_copy(update={
        "missions": missions,
        "total_hours": clamp_total_hours(total),
    })


def _distribute(total: float, weights: List[int]) -> List[float]:
    # last share absorbs rounding so the hours add up to the total
    weight_sum = sum(weights)
    hours = [round(total * w / weight_sum, 2) for w in weights[:-1]]
    hours.append(round(total - sum(hours), 2))
    return hours


def fallback_analysis(crawl_results: Iterable[CrawlResult], tier: str, hints: Hints) -> AnalysisResult:
    template = [m for m in FALLBACK_MISSIONS if m[3] is None or getattr(hints, m[3])]
    total = FALLBACK_TOTAL_HOURS[tier]
    marker = TIER_MARKERS[tier]
    hours = _distribute(total, [m[2] for m in template])

    missions = [
        Mission(category=category, title=f"{marker} {title}", hours=h, confidence=FALLBACK_CONFIDENCE)
        for (category, title, _, _), h in zip(template, hours)
    ]
    evidence = [
        Evidence(url=r.url, snippet=r.content[:EVIDENCE_SNIPPET_CHARS])
        for r in crawl_results
        if r.content
    ]
    return AnalysisResult(
        total_hours=total,
        confidence=FALLBACK_CONFIDENCE,
        missions=missions,
        product_map=ProductMap(
            roles=["User"],
            objects=["Content"],
            stories=[UserStory(role="User", i_can="view content")],
        ),
        evidence=evidence,
        scope=f"{TIER_DESCRIPTIONS[tier]} - Analysis failed, showing fallback estimate",
    )
