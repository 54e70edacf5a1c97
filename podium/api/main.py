"""
podium.api.main — FastAPI application entry point
==================================================

Run with::

    uvicorn podium.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from podium.api.auth import router as auth_router  # noqa: E402
from podium.api.deps import get_config, get_engine  # noqa: E402
from podium.api.routes.achievements import router as achievements_router  # noqa: E402
from podium.api.routes.tasks import router as tasks_router  # noqa: E402
from podium.api.routes.teams import router as teams_router  # noqa: E402
from podium.engine.badges import BadgeCache  # noqa: E402
from podium.errors import PodiumError, ValidationError  # noqa: E402
from podium.services.session_store import SessionStore  # noqa: E402

logger = logging.getLogger(__name__)

__all__ = ["app", "get_config", "get_engine"]


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


def _configure_logging() -> None:
    level = os.getenv("PODIUM_LOG_LEVEL", "").strip().upper()
    if not level:
        return
    numeric = getattr(logging, level, None)
    if not isinstance(numeric, int):
        logger.warning("Ignoring unknown PODIUM_LOG_LEVEL %r", level)
        return
    logging.getLogger().setLevel(numeric)
    logging.getLogger("podium").setLevel(numeric)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — own the session store and badge cache."""
    _configure_logging()

    store = SessionStore()
    store.init()
    app.state.session_store = store
    app.state.badge_cache = BadgeCache()
    logger.info("Podium API started")
    yield
    store.teardown()
    app.state.badge_cache.clear()
    logger.info("Podium API shutting down")


app = FastAPI(
    title="Podium API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PodiumError)
async def podium_error_handler(request: Request, exc: PodiumError):
    body: dict = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


# Mount routers
app.include_router(auth_router, prefix="/api")
app.include_router(teams_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(achievements_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
