import os
from typing import List, Optional
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) in ("1", "true", "True")


class Settings(BaseModel):
    openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./data/clonetime.db")
    app_env: str = os.getenv("APP_ENV", "production")
    app_version: str = os.getenv("APP_VERSION", "v1")
    use_mock_openai: bool = _flag("USE_MOCK_OPENAI")
    crawl_timeout_ms: int = int(os.getenv("CRAWL_TIMEOUT_MS", "10000"))
    fetch_timeout_s: float = float(os.getenv("FETCH_TIMEOUT_S", "15"))
    user_agent: str = os.getenv("CRAWL_USER_AGENT", "Mozilla/5.0 (compatible; Clonetime/1.0)")
    allowed_origins: List[str] = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        # force=true bypasses the cache only in development
        return self.app_env.lower() == "development"


def get_settings() -> Settings:
    return Settings()
