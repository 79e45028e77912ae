"""
Watch Diary — Service Wiring
Builds the search service and watchlist store from settings and exposes
them to routers as FastAPI dependencies.
"""

from fastapi import Request

from watchdiary.config import Settings
from watchdiary.services.search import MovieSearchService, SearchConfig
from watchdiary.services.watchlist import WatchlistStore
from watchdiary.storage.base import WatchlistBackend
from watchdiary.storage.keyvalue import JsonFileStorage, KeyValueBackend, MemoryStorage
from watchdiary.storage.rest import RestCollectionBackend


def build_backend(settings: Settings) -> WatchlistBackend:
    kind = settings.WATCHLIST_BACKEND
    if kind == "sql":
        from watchdiary.database import async_session
        from watchdiary.storage.sql import SqlBackend
        return SqlBackend(async_session)
    if kind == "file":
        return KeyValueBackend(JsonFileStorage(settings.WATCHLIST_FILE))
    if kind == "rest":
        return RestCollectionBackend(settings.BACKEND_URL)
    if kind == "memory":
        return KeyValueBackend(MemoryStorage())
    raise ValueError(f"Unknown WATCHLIST_BACKEND: {kind!r}")


def build_watchlist_store(settings: Settings) -> WatchlistStore:
    return WatchlistStore(
        build_backend(settings),
        rollback_on_failure=settings.WATCHLIST_ROLLBACK_ON_FAILURE,
    )


def build_search_service(settings: Settings) -> MovieSearchService:
    return MovieSearchService(SearchConfig.from_settings(settings))


def get_watchlist_store(request: Request) -> WatchlistStore:
    """Dependency: the process-wide watchlist created at startup."""
    return request.app.state.watchlist


def get_search_service(request: Request) -> MovieSearchService:
    """Dependency: the configured upstream search client."""
    return request.app.state.search_service
