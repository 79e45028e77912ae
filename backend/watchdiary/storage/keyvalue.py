"""
Watch Diary — Key-Value Storage Backend
The watchlist lives as one JSON array under a fixed key, the same way a
browser keeps it in local storage.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

from watchdiary.schemas import MovieRecord
from watchdiary.storage.base import PersistenceError, WatchlistBackend, decode_records

logger = logging.getLogger(__name__)

WATCHLIST_KEY = "watchedMovies"


class StorageQuotaExceeded(OSError):
    pass


class MemoryStorage:
    """Process-local key-value storage with an optional size quota (bytes)."""

    def __init__(self, quota: Optional[int] = None):
        self._data: dict[str, str] = {}
        self.quota = quota

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self.quota:
                raise StorageQuotaExceeded(f"Storage quota of {self.quota} bytes exceeded")
        self._data[key] = value


class JsonFileStorage:
    """Key-value storage kept in a single JSON object file on disk."""

    def __init__(self, path: str):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)


def dumps(records: list[MovieRecord]) -> str:
    return json.dumps([r.to_storage() for r in records])


def loads(raw: Optional[str]) -> list[MovieRecord]:
    if raw is None:
        return []
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored watchlist is not a JSON array")
    return decode_records(data)


class KeyValueBackend(WatchlistBackend):
    """
    Snapshot backend over a get/set storage.

    Storage calls run in a worker thread so file I/O does not block the
    event loop. After a failed load every write is refused: rewriting the
    snapshot from an empty in-memory list would erase what is still stored.
    """

    name = "keyvalue"

    def __init__(self, storage, key: str = WATCHLIST_KEY):
        self.storage = storage
        self.key = key
        self.load_failed = False

    async def load(self) -> list[MovieRecord]:
        try:
            raw = await asyncio.to_thread(self.storage.get, self.key)
            records = loads(raw)
        except (OSError, ValueError) as e:
            self.load_failed = True
            raise PersistenceError(f"Could not read saved watchlist: {e}") from e
        self.load_failed = False
        return records

    async def _write(self, snapshot: list[MovieRecord]) -> None:
        if self.load_failed:
            raise PersistenceError(
                "Saved watchlist could not be read; refusing to overwrite it"
            )
        try:
            await asyncio.to_thread(self.storage.set, self.key, dumps(snapshot))
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not save watchlist: {e}") from e
        logger.debug(f"Saved {len(snapshot)} watchlist entries under '{self.key}'")

    async def persist_add(self, record: MovieRecord, snapshot: list[MovieRecord]) -> None:
        await self._write(snapshot)

    async def persist_remove(self, movie_id: str, snapshot: list[MovieRecord]) -> None:
        await self._write(snapshot)

    async def ping(self) -> None:
        try:
            await asyncio.to_thread(self.storage.get, self.key)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Storage unreadable: {e}") from e
