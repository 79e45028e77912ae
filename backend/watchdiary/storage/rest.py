"""
Watch Diary — Remote REST Collection Backend
Mirrors the watchlist to another backend exposing:
    GET /movies, POST /movies, DELETE /movies/{id}
"""

import httpx
import logging
from typing import Optional
from urllib.parse import quote

from watchdiary.schemas import MovieRecord
from watchdiary.storage.base import PersistenceError, WatchlistBackend, decode_records

logger = logging.getLogger(__name__)


class RestCollectionBackend(WatchlistBackend):
    name = "rest"

    def __init__(
        self,
        base_url: str,
        collection: str = "/movies",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("BACKEND_URL is required for the rest watchlist backend")
        self.base_url = base_url.rstrip("/")
        self.collection = "/" + collection.strip("/")
        self.timeout = timeout
        self._transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Watchlist backend {method} {path} failed: {e}")
            raise PersistenceError(f"Watchlist backend unreachable: {e}") from e

    async def load(self) -> list[MovieRecord]:
        resp = await self._request("GET", self.collection)
        if not resp.is_success:
            raise PersistenceError(f"Watchlist backend returned {resp.status_code}")
        try:
            data = resp.json()
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            return decode_records(data)
        except ValueError as e:
            raise PersistenceError(f"Watchlist backend sent an unreadable list: {e}") from e

    async def persist_add(self, record: MovieRecord, snapshot: list[MovieRecord]) -> None:
        resp = await self._request("POST", self.collection, json=record.to_storage())
        if not resp.is_success:
            raise PersistenceError(f"Failed to add movie ({resp.status_code})")

    async def persist_remove(self, movie_id: str, snapshot: list[MovieRecord]) -> None:
        resp = await self._request("DELETE", f"{self.collection}/{quote(movie_id, safe='')}")
        # 404 means the remote side never had it, which is the state we want
        if resp.status_code != 404 and not resp.is_success:
            raise PersistenceError(f"Failed to remove movie ({resp.status_code})")
