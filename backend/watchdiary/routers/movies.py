"""
Watch Diary — Watched Movies Router
REST collection for the watchlist: list, add, remove.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Response

from watchdiary.dependencies import get_watchlist_store
from watchdiary.schemas import MovieRecord
from watchdiary.services.watchlist import WatchlistStore
from watchdiary.storage.base import PersistenceError

logger = logging.getLogger(__name__)

router = APIRouter()

# Mounted under /api: per-movie add/remove button state
status_router = APIRouter(prefix="/watchlist", tags=["Watchlist"])


@router.get("", response_model=list[MovieRecord])
async def list_watched(watchlist: WatchlistStore = Depends(get_watchlist_store)):
    return watchlist.records


@router.post("", response_model=MovieRecord, status_code=201)
async def add_watched(
    movie: MovieRecord,
    response: Response,
    watchlist: WatchlistStore = Depends(get_watchlist_store),
):
    """Add a movie. Re-adding a watched id returns the existing entry with 200."""
    try:
        stored = await watchlist.add(movie)
    except PersistenceError as e:
        logger.error(f"❌ Persisting add of {movie.id} failed: {e}")
        raise HTTPException(status_code=503, detail="Failed to save movie to watchlist.")

    if stored is None:
        response.status_code = 200
        return watchlist.get(movie.id)
    return stored


@router.delete("/{movie_id}", status_code=204)
async def remove_watched(
    movie_id: str,
    watchlist: WatchlistStore = Depends(get_watchlist_store),
):
    try:
        removed = await watchlist.remove(movie_id)
    except PersistenceError as e:
        logger.error(f"❌ Persisting removal of {movie_id} failed: {e}")
        raise HTTPException(status_code=503, detail="Failed to remove movie from watchlist.")

    if not removed:
        raise HTTPException(status_code=404, detail="Movie not in watchlist")
    return Response(status_code=204)


@status_router.get("/{movie_id}")
async def watchlist_status(
    movie_id: str,
    watchlist: WatchlistStore = Depends(get_watchlist_store),
):
    return {"id": movie_id, "watched": watchlist.contains(movie_id)}
