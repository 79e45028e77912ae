"""
Watch Diary — Search Router
Proxies the upstream movie search and marks results already watched.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query

from watchdiary.dependencies import get_search_service, get_watchlist_store
from watchdiary.schemas import SearchHit, SearchResponse
from watchdiary.services.search import MovieSearchService, UpstreamSearchError
from watchdiary.services.watchlist import WatchlistStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])

SEARCH_FAILED = "Failed to fetch movies. Please try again later."
NO_RESULTS = "No movies found."


@router.get("", response_model=SearchResponse)
async def search_movies(
    q: str = Query(..., min_length=1, max_length=200, description="Search query"),
    search_service: MovieSearchService = Depends(get_search_service),
    watchlist: WatchlistStore = Depends(get_watchlist_store),
):
    """Search upstream; each result says whether it is already on the watchlist."""
    try:
        records = await search_service.search(q)
    except UpstreamSearchError as e:
        logger.warning(f"Search for '{q}' failed: {e}")
        raise HTTPException(status_code=502, detail=SEARCH_FAILED)

    results = [
        SearchHit(**r.model_dump(), in_watchlist=watchlist.contains(r.id))
        for r in records
    ]
    return SearchResponse(
        query=q.strip(),
        results=results,
        message=None if results else NO_RESULTS,
    )
