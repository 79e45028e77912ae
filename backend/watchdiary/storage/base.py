"""
Watch Diary — Persistence Boundary
Every watchlist backend implements this interface. Backends either rewrite
the whole snapshot (key-value storage) or send the single change (REST, SQL).
"""

import logging

from pydantic import ValidationError

from watchdiary.schemas import MovieRecord

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """The backing store could not be read or written. Recoverable."""
    pass


def decode_records(items: list) -> list[MovieRecord]:
    """Validate stored entries, skipping (and logging) any that cannot be read."""
    records = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"Skipping stored watchlist entry #{position}: not an object")
            continue
        try:
            records.append(MovieRecord.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping unreadable watchlist entry #{position}: {e.error_count()} errors")
    return records


class WatchlistBackend:
    name = "abstract"

    async def load(self) -> list[MovieRecord]:
        raise NotImplementedError

    async def persist_add(self, record: MovieRecord, snapshot: list[MovieRecord]) -> None:
        raise NotImplementedError

    async def persist_remove(self, movie_id: str, snapshot: list[MovieRecord]) -> None:
        raise NotImplementedError

    async def ping(self) -> None:
        """Raise PersistenceError if the backend is unreachable."""
        await self.load()
