from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from ..config import Settings, get_settings
from ..db import get_session_factory
from ..errors import InvalidRequest, StoreError
from ..schemas import AnalyzeRequest
from ..service import analyze_url, list_analyses
from ..utils.logging import get_logger

log = get_logger(__name__)
router = APIRouter()


@router.post("/analyze")
def analyze(body: AnalyzeRequest, settings: Settings = Depends(get_settings), SessionLocal=Depends(get_session_factory)):
    try:
        return analyze_url(body.url, body.tier, force=body.force, settings=settings, SessionLocal=SessionLocal)
    except InvalidRequest as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except StoreError:
        log.exception("Database fetch error")
        return JSONResponse(status_code=500, content={"error": "Database error"})
    except Exception as e:
        log.exception("Analysis error")
        content = {"error": str(e) or "Analysis failed"}
        if settings.is_development:
            content["detail"] = repr(e)
        return JSONResponse(status_code=500, content=content)


@router.get("/analyze")
def recent_analyses(limit: int = Query(10), search: Optional[str] = None, SessionLocal=Depends(get_session_factory)):
    try:
        return list_analyses(limit=limit, search=search, SessionLocal=SessionLocal)
    except StoreError:
        log.exception("Database query error")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch analyses"})
