from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

Tier = Literal["speedrun", "mvp", "prod-lite"]
TIERS = ("speedrun", "mvp", "prod-lite")

TIER_DESCRIPTIONS: Dict[str, str] = {
    "speedrun": "quick prototype with minimal features, no auth, basic UI",
    "mvp": "functional product with core features, basic auth, decent UI",
    "prod-lite": "production-ready with full features, proper auth, polished UI",
}

TIER_MULTIPLIERS: Dict[str, float] = {
    "speedrun": 1,
    "mvp": 2.5,
    "prod-lite": 5,
}

# Mission titles carry one of these so mixed-tier lists stay readable
TIER_MARKERS: Dict[str, str] = {
    "speedrun": "[S]",
    "mvp": "[M]",
    "prod-lite": "[P]",
}

MissionCategory = Literal[
    "Accounts",
    "Data",
    "Content",
    "Commerce",
    "Social",
    "API",
    "Admin",
    "Analytics",
    "Notifications",
    "Search",
    "Media",
]

MISSION_CATEGORIES = (
    "Accounts",
    "Data",
    "Content",
    "Commerce",
    "Social",
    "API",
    "Admin",
    "Analytics",
    "Notifications",
    "Search",
    "Media",
)


class AnalyzeRequest(BaseModel):
    url: Optional[str] = None
    tier: Optional[str] = None
    force: bool = False


class CrawlResult(BaseModel):
    url: str
    title: str = ""
    content: str = ""
    error: Optional[str] = None


class Mission(BaseModel):
    category: MissionCategory
    title: str
    hours: float = Field(ge=0)
    confidence: float = Field(ge=0, le=1)


class UserStory(BaseModel):
    role: str
    i_can: str


class ProductMap(BaseModel):
    roles: List[str] = []
    objects: List[str] = []
    stories: List[UserStory] = []


class Evidence(BaseModel):
    url: str
    snippet: str


class AnalysisResult(BaseModel):
    total_hours: float = Field(ge=0)
    confidence: float = Field(ge=0, le=1)
    missions: List[Mission]
    product_map: ProductMap
    evidence: List[Evidence] = []
    scope: str = ""
    summary: Optional[str] = None


class StoredAnalysis(BaseModel):
    id: str
    url: str
    url_canonical: str
    tier: Tier
    fingerprint: str
    result: dict
    is_public: bool
    created_at: Optional[str] = None
