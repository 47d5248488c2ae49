from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from .db import session_scope
from .errors import StoreError
from .models import Analysis
from .schemas import StoredAnalysis

MAX_LIST_LIMIT = 50


def lookup_analysis(SessionLocal, fingerprint: str) -> Optional[dict]:
    try:
        with session_scope(SessionLocal) as s:
            row = s.query(Analysis).filter_by(fingerprint=fingerprint).first()
            return dict(row.result) if row else None
    except SQLAlchemyError as e:
        raise StoreError(f"lookup failed: {e}") from e


def store_analysis(SessionLocal, *, url: str, url_canonical: str, tier: str, fingerprint: str, result: dict, is_public: bool = True):
    """Insert or replace the row for ``fingerprint``. Last writer wins."""
    try:
        with session_scope(SessionLocal) as s:
            existing = s.query(Analysis).filter_by(fingerprint=fingerprint).first()
            if existing:
                existing.url = url
                existing.url_canonical = url_canonical
                existing.tier = tier
                existing.result = result
                existing.is_public = is_public
            else:
                s.add(Analysis(
                    url=url,
                    url_canonical=url_canonical,
                    tier=tier,
                    fingerprint=fingerprint,
                    result=result,
                    is_public=is_public,
                ))
    except SQLAlchemyError as e:
        raise StoreError(f"upsert failed: {e}") from e


def _row_to_dict(row: Analysis) -> dict:
    return StoredAnalysis(
        id=row.id,
        url=row.url,
        url_canonical=row.url_canonical,
        tier=row.tier,
        fingerprint=row.fingerprint,
        result=row.result,
        is_public=row.is_public,
        created_at=row.created_at.isoformat() if row.created_at else None,
    ).model_dump()


def list_public_analyses(SessionLocal, limit: int = 10, search: Optional[str] = None) -> List[dict]:
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    try:
        with session_scope(SessionLocal) as s:
            q = s.query(Analysis).filter(Analysis.is_public.is_(True))
            if search:
                pattern = f"%{search}%"
                q = q.filter(or_(Analysis.url.ilike(pattern), Analysis.url_canonical.ilike(pattern)))
            rows = q.order_by(Analysis.created_at.desc()).limit(limit).all()
            return [_row_to_dict(r) for r in rows]
    except SQLAlchemyError as e:
        raise StoreError(f"list failed: {e}") from e
