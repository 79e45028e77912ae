"""
Watch Diary — Watchlist Store
In-memory ordered watchlist mirrored to a persistence backend.

Mutations happen synchronously before the backend call is awaited, so a
contains-check and the append it guards can never interleave on the event
loop. When the backend fails the in-memory change is kept and the
PersistenceError is raised to the caller, unless rollback_on_failure is set.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from watchdiary.schemas import MovieRecord
from watchdiary.storage.base import PersistenceError, WatchlistBackend

logger = logging.getLogger(__name__)


class WatchlistStore:
    def __init__(self, backend: WatchlistBackend, rollback_on_failure: bool = False):
        self.backend = backend
        self.rollback_on_failure = rollback_on_failure
        self._records: list[MovieRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[MovieRecord]:
        return list(self._records)

    def contains(self, movie_id: str) -> bool:
        return any(r.id == movie_id for r in self._records)

    def get(self, movie_id: str) -> Optional[MovieRecord]:
        for record in self._records:
            if record.id == movie_id:
                return record
        return None

    async def load(self) -> list[MovieRecord]:
        """Replace in-memory state with whatever the backend holds."""
        stored = await self.backend.load()
        seen = set()
        records = []
        for record in stored:
            if record.id in seen:
                logger.warning(f"Dropping duplicate watchlist entry {record.id}")
                continue
            seen.add(record.id)
            records.append(record)
        self._records = records
        logger.info(f"📋 Loaded {len(records)} watched movies from {self.backend.name}")
        return self.records

    async def add(self, record: MovieRecord) -> Optional[MovieRecord]:
        """
        Append a copy of `record` stamped with dateAdded.

        Returns:
            The stored record, or None when the id is already watched.

        Raises:
            PersistenceError: the backend rejected the write
        """
        if self.contains(record.id):
            logger.debug(f"Skipping duplicate add for {record.id}")
            return None

        stored = record.model_copy(update={"date_added": datetime.now(timezone.utc)})
        self._records.append(stored)

        try:
            await self.backend.persist_add(stored, self.records)
        except PersistenceError:
            if self.rollback_on_failure:
                self._records = [r for r in self._records if r is not stored]
            raise
        logger.info(f"➕ Added '{stored.title}' ({stored.id})")
        return stored

    async def remove(self, movie_id: str) -> bool:
        """
        Remove the entry with `movie_id`. Returns False when it was not watched.

        Raises:
            PersistenceError: the backend rejected the delete
        """
        for index, record in enumerate(self._records):
            if record.id == movie_id:
                break
        else:
            return False

        del self._records[index]

        try:
            await self.backend.persist_remove(movie_id, self.records)
        except PersistenceError:
            # The id may have been re-added while the delete was in flight
            if self.rollback_on_failure and not self.contains(movie_id):
                self._records.insert(min(index, len(self._records)), record)
            raise
        logger.info(f"➖ Removed '{record.title}' ({movie_id})")
        return True
