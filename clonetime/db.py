from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import get_settings

Base = declarative_base()
_engine = None
_SessionLocal = None


def _ensure_sqlite_dir(url: str):
    prefix = "sqlite:///"
    if url.startswith(prefix) and ":memory:" not in url:
        Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


def init_engine_and_session(database_url=None):
    global _engine, _SessionLocal
    url = database_url or get_settings().database_url
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        _ensure_sqlite_dir(url)
    _engine = create_engine(url, echo=False, future=True, connect_args=connect_args)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine, _SessionLocal


def create_tables(engine):
    from . import models  # noqa: F401  register tables on Base
    Base.metadata.create_all(bind=engine)


def get_session_factory():
    if _SessionLocal is None:
        engine, _ = init_engine_and_session()
        create_tables(engine)
    return _SessionLocal


@contextmanager
def session_scope(SessionLocal=None):
    session = (SessionLocal or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
