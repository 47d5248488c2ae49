import re
from dataclasses import dataclass
from typing import Dict, Iterable
from ..schemas import CrawlResult

AUTH_RE = re.compile(
    r"\b(sign[ -]?in|sign[ -]?up|log[ -]?in|log[ -]?out|register|create (an |your )?account|my account"
    r"|forgot (your )?password|password|single sign[ -]on|sso|oauth)\b"
)
ADMIN_RE = re.compile(
    r"\b(admin|administrator|admin panel|dashboard|back[ -]?office|moderat(e|ion|or)"
    r"|manage (your )?(users|team|members)|roles (and|&) permissions)\b"
)
API_RE = re.compile(
    r"\b(apis?|restful|rest api|graphql|webhooks?|sdks?|developer docs|endpoints?)\b"
)
PORTFOLIO_RE = re.compile(
    r"\b(portfolio|our work|case stud(y|ies)|agency|studio|selected work|hire (me|us)|freelanc(e|er))\b"
)


@dataclass(frozen=True)
class Hints:
    has_auth: bool = False
    has_admin: bool = False
    mentions_api: bool = False
    is_portfolio_like: bool = False

    def as_dict(self) -> Dict[str, bool]:
        return {
            "hasAuth": self.has_auth,
            "hasAdmin": self.has_admin,
            "mentionsApi": self.mentions_api,
            "isPortfolioLike": self.is_portfolio_like,
        }


def compute_hints(crawl_results: Iterable[CrawlResult]) -> Hints:
    text = " ".join(f"{r.title} {r.content}" for r in crawl_results).lower()
    has_auth = bool(AUTH_RE.search(text))
    has_admin = bool(ADMIN_RE.search(text))
    return Hints(
        has_auth=has_auth,
        has_admin=has_admin,
        mentions_api=bool(API_RE.search(text)),
        is_portfolio_like=bool(PORTFOLIO_RE.search(text)) and not has_auth and not has_admin,
    )
