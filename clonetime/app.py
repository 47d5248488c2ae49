from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .db import init_engine_and_session, create_tables
from .api.analyses import router as analyses_router
from .utils.logging import get_logger

log = get_logger(__name__)
settings = get_settings()

app = FastAPI(title="Clonetime", version=settings.app_version)

if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
def on_startup():
    engine, _ = init_engine_and_session(settings.database_url)
    create_tables(engine)
    log.info(f"Clonetime {settings.app_version} started ({settings.app_env})")


@app.get("/health")
def health():
    return {"ok": True, "version": settings.app_version}


app.include_router(analyses_router, prefix="/api", tags=["analyses"])
