import json
import math
from typing import Any, Dict, List, Sequence
import openai
from openai import OpenAI
from pydantic import ValidationError
from ..config import Settings
from ..errors import LLMError
from ..schemas import (
    AnalysisResult,
    CrawlResult,
    MISSION_CATEGORIES,
    TIER_DESCRIPTIONS,
    TIER_MARKERS,
    TIER_MULTIPLIERS,
)
from .hints import Hints

SYSTEM_PROMPT = (
    "You are an expert developer who can accurately estimate build times for web applications. "
    "Respond only with valid JSON."
)

PROMPT_TEXT_BUDGET = 12000
TEMPERATURE = 0.3
MAX_TOKENS = 2000

REQUIRED_KEYS = ("total_hours", "missions", "product_map")

OUTPUT_SCHEMA = """{
  "total_hours": <number>,
  "confidence": <0-1>,
  "missions": [
    {"category": "<category>", "title": "<marker> <mission title>", "hours": <number>, "confidence": <0-1>}
  ],
  "product_map": {
    "roles": ["<user role>"],
    "objects": ["<main data objects>"],
    "stories": [{"role": "<role>", "i_can": "<action>"}]
  },
  "evidence": [{"url": "<page url>", "snippet": "<relevant text from page>"}],
  "scope": "<assumptions and limitations>",
  "summary": "<one sentence on what the product is>"
}"""

_CATEGORY_LOOKUP = {c.lower(): c for c in MISSION_CATEGORIES}
_CATEGORY_LOOKUP.update({
    "auth": "Accounts",
    "authentication": "Accounts",
    "account": "Accounts",
    "users": "Accounts",
    "payments": "Commerce",
    "ecommerce": "Commerce",
    "e-commerce": "Commerce",
    "billing": "Commerce",
    "integrations": "API",
    "integration": "API",
    "dashboard": "Admin",
    "email": "Notifications",
    "ui": "Content",
    "frontend": "Content",
    "database": "Data",
    "backend": "Data",
})


def _site_text(crawl_results: Sequence[CrawlResult]) -> str:
    text = "\n\n---\n\n".join(
        f"URL: {r.url}\nTitle: {r.title}\nContent: {r.content}"
        for r in crawl_results
        if not r.error
    )
    return text[:PROMPT_TEXT_BUDGET]


def build_user_prompt(crawl_results: Sequence[CrawlResult], tier: str, hints: Hints) -> str:
    marker = TIER_MARKERS[tier]
    hint_rules = []
    if not hints.has_auth:
        hint_rules.append("- No sign-in or account features were found: do NOT include Accounts missions.")
    if not hints.has_admin:
        hint_rules.append("- No admin or dashboard features were found: do NOT include Admin missions.")
    if not hints.mentions_api:
        hint_rules.append("- No public API was found: do NOT include API missions.")
    if hints.is_portfolio_like:
        hint_rules.append("- This looks like a portfolio or agency site: keep the estimate small and content-focused.")

    return (
        f"You are analyzing a website to estimate how long it would take to rebuild as a {TIER_DESCRIPTIONS[tier]}.\n\n"
        f"Website content:\n{_site_text(crawl_results)}\n\n"
        f"DETECTED_SIGNALS:\n{json.dumps(hints.as_dict())}\n"
        + ("\n".join(hint_rules) + "\n" if hint_rules else "")
        + f"\nPlease analyze this website and provide a JSON response with the following structure:\n{OUTPUT_SCHEMA}\n\n"
        f"Mission categories must be one of: {', '.join(MISSION_CATEGORIES)}\n"
        f"Every mission title must start with \"{marker}\".\n\n"
        "Base time estimates on these factors:\n"
        "- UI complexity (simple forms vs rich interactions)\n"
        "- Data modeling needs (users, content, relationships)\n"
        "- Core features (auth, CRUD, search, payments, etc.)\n"
        "- Integration complexity\n\n"
        f"For {tier} tier, multiply base estimates by {TIER_MULTIPLIERS[tier]}x. "
        "total_hours must equal the sum of mission hours and must not exceed 48.\n\n"
        "Be realistic but not overly pessimistic. Focus on core functionality needed to recreate the main value proposition."
    )


def _as_float(value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    # inf and nan are not valid JSON
    return result if math.isfinite(result) else default


def _clamp01(value: Any, default: float = 0.5) -> float:
    return max(0.0, min(1.0, _as_float(value, default)))


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _normalize_missions(missions: Any, tier: str) -> List[Dict[str, Any]]:
    marker = TIER_MARKERS[tier]
    out = []
    for m in missions if isinstance(missions, list) else []:
        if not isinstance(m, dict):
            continue
        hours = _as_float(m.get("hours"), -1)
        if hours < 0:
            continue
        category = _CATEGORY_LOOKUP.get(str(m.get("category") or "").strip().lower(), "Content")
        title = str(m.get("title") or category).strip()
        # models sometimes use another tier's marker
        for other in TIER_MARKERS.values():
            if title.startswith(other):
                title = title[len(other):].strip()
        out.append({
            "category": category,
            "title": f"{marker} {title}",
            "hours": hours,
            "confidence": _clamp01(m.get("confidence")),
        })
    return out


def _normalize_product_map(product_map: Any) -> Dict[str, Any]:
    product_map = product_map if isinstance(product_map, dict) else {}
    stories = []
    for s in product_map.get("stories") or []:
        if isinstance(s, dict) and s.get("role") and s.get("i_can"):
            stories.append({"role": str(s["role"]), "i_can": str(s["i_can"])})
    return {
        "roles": _as_str_list(product_map.get("roles")),
        "objects": _as_str_list(product_map.get("objects")),
        "stories": stories,
    }


def parse_analysis(raw: Any, tier: str) -> AnalysisResult:
    """Turn the model's JSON into an AnalysisResult or raise LLMError.

    Enum-ish fields are coerced onto the values we accept. Missing core
    fields are not repaired.
    """
    if not isinstance(raw, dict):
        raise LLMError("Invalid analysis format")
    if any(not raw.get(k) for k in REQUIRED_KEYS):
        raise LLMError("Invalid analysis format")

    evidence = [
        {"url": str(e.get("url") or ""), "snippet": str(e.get("snippet") or "")}
        for e in raw.get("evidence") or []
        if isinstance(e, dict)
    ]
    summary = raw.get("summary")
    data = {
        "total_hours": _as_float(raw.get("total_hours"), -1),
        "confidence": _clamp01(raw.get("confidence")),
        "missions": _normalize_missions(raw.get("missions"), tier),
        "product_map": _normalize_product_map(raw.get("product_map")),
        "evidence": evidence,
        "scope": str(raw.get("scope") or ""),
        "summary": str(summary).strip() if summary else None,
    }
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise LLMError(f"Invalid analysis format: {e}") from e


def _mock_response(tier: str, hints: Hints) -> Dict[str, Any]:
    # Deterministic stand-in for local development without an API key
    scale = TIER_MULTIPLIERS[tier]
    missions = [
        {"category": "Content", "title": "Marketing pages", "hours": 1.5 * scale, "confidence": 0.7},
        {"category": "Data", "title": "Core objects and CRUD", "hours": 2 * scale, "confidence": 0.6},
    ]
    if hints.has_auth:
        missions.append({"category": "Accounts", "title": "Sign-up and login", "hours": 1 * scale, "confidence": 0.7})
    if hints.has_admin:
        missions.append({"category": "Admin", "title": "Admin dashboard", "hours": 1 * scale, "confidence": 0.5})
    if hints.mentions_api:
        missions.append({"category": "API", "title": "Public API", "hours": 1 * scale, "confidence": 0.5})
    return {
        "total_hours": sum(m["hours"] for m in missions),
        "confidence": 0.6,
        "missions": missions,
        "product_map": {"roles": ["User"], "objects": ["Item"], "stories": [{"role": "User", "i_can": "browse items"}]},
        "evidence": [],
        "scope": "Mock estimate",
        "summary": "Mock analysis.",
    }


def call_openai(crawl_results: Sequence[CrawlResult], tier: str, hints: Hints, settings: Settings) -> Dict[str, Any]:
    if settings.use_mock_openai:
        return _mock_response(tier, hints)

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(crawl_results, tier, hints)},
    ]
    try:
        client = OpenAI(api_key=settings.openai_api_key)
        resp = client.chat.completions.create(
            model=settings.openai_model,
            messages=messages,
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
            response_format={"type": "json_object"},
        )
    except openai.OpenAIError as e:
        raise LLMError(f"OpenAI request failed: {e}") from e

    content = resp.choices[0].message.content if resp.choices else None
    if not content:
        raise LLMError("No response from OpenAI")
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise LLMError("OpenAI returned invalid JSON") from e
