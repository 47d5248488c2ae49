import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON, Boolean
from .db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Analysis(Base):
    __tablename__ = "clonetime_analyses"
    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    created_by = Column(String, nullable=True)
    url = Column(String, nullable=False)
    url_canonical = Column(String, index=True, nullable=False)
    tier = Column(String, nullable=False)
    fingerprint = Column(String, unique=True, index=True, nullable=False)
    result = Column(JSON, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
