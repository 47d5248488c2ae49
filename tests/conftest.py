"""Shared fixtures: throwaway sqlite stores, explicit settings, page factories."""

import pytest

from clonetime.config import Settings
from clonetime.db import create_tables, init_engine_and_session
from clonetime.schemas import CrawlResult


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="sk-test",
        openai_model="gpt-4o-mini",
        app_env="production",
        use_mock_openai=False,
        crawl_timeout_ms=1000,
        fetch_timeout_s=1,
    )


@pytest.fixture
def dev_settings(settings) -> Settings:
    return settings.model_copy(update={"app_env": "development"})


@pytest.fixture
def session_factory(tmp_path):
    engine, SessionLocal = init_engine_and_session(f"sqlite:///{tmp_path / 'clonetime.db'}")
    create_tables(engine)
    yield SessionLocal
    engine.dispose()


def make_page(url="https://example.com", title="Example", content="", error=None) -> CrawlResult:
    return CrawlResult(url=url, title=title, content=content, error=error)


@pytest.fixture
def page():
    return make_page
