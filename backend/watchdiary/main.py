"""
Watch Diary — FastAPI Application
Search movies, keep a list of what you've watched.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from watchdiary.config import get_settings
from watchdiary.dependencies import (
    build_search_service,
    build_watchlist_store,
    get_watchlist_store,
)
from watchdiary.routers import movies, search
from watchdiary.schemas import HealthCheck
from watchdiary.storage.base import PersistenceError

settings = get_settings()

# ─── Logging ──────────────────────────────────────────────

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ─────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: build services and load the watchlist. Shutdown: cleanup."""
    logger.info("🎬 Watch Diary — Starting up...")

    if settings.WATCHLIST_BACKEND == "sql":
        from watchdiary.database import init_db
        from watchdiary.models import WatchedMovie  # noqa: F401
        await init_db()
        logger.info("✅ Database initialized")

    app.state.search_service = build_search_service(settings)
    app.state.watchlist = build_watchlist_store(settings)
    try:
        await app.state.watchlist.load()
    except PersistenceError as e:
        logger.error(f"❌ Could not load watchlist, starting empty: {e}")

    yield
    logger.info("👋 Shutting down...")


# ─── App ──────────────────────────────────────────────────

app = FastAPI(
    title="Watch Diary API",
    description="Movie search and a personal watched list.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT == "development" else None,
)


# ─── Global Error Handler ─────────────────────────────────
# SECURITY: Never leak tracebacks, API keys, or file paths to clients.

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# CORS — allow frontend origins
origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── Routers ──────────────────────────────────────────────

app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(movies.status_router, prefix="/api")
app.include_router(movies.router, prefix="/movies", tags=["movies"])
# Older clients talk to /watched-movies
app.include_router(movies.router, prefix="/watched-movies", tags=["movies"], include_in_schema=False)


# ─── Health Check ─────────────────────────────────────────

@app.get("/health", response_model=HealthCheck)
async def health_check(request: Request, check_storage: bool = False):
    if not check_storage:
        return HealthCheck(status="ok")

    watchlist = get_watchlist_store(request)
    try:
        await watchlist.backend.ping()
    except PersistenceError as e:
        logger.error(f"Health storage fail: {e}")
        return HealthCheck(status="degraded", storage="disconnected")
    return HealthCheck(status="ok", storage="connected")
