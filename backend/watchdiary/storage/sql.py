"""
Watch Diary — SQL Backend
Keeps the watchlist in the `watched_movies` table via async SQLAlchemy.
"""

import logging
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from watchdiary.models import WatchedMovie
from watchdiary.schemas import MovieRecord
from watchdiary.storage.base import PersistenceError, WatchlistBackend

logger = logging.getLogger(__name__)


def _to_record(row: WatchedMovie) -> MovieRecord:
    return MovieRecord(
        id=row.movie_id,
        title=row.title,
        image=row.image or "",
        year=row.year,
        date_added=row.date_added,
    )


class SqlBackend(WatchlistBackend):
    name = "sql"

    def __init__(self, sessionmaker: async_sessionmaker):
        self.sessionmaker = sessionmaker

    async def load(self) -> list[MovieRecord]:
        try:
            async with self.sessionmaker() as db:
                result = await db.execute(select(WatchedMovie).order_by(WatchedMovie.seq))
                return [_to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read watchlist table: {e}") from e

    async def persist_add(self, record: MovieRecord, snapshot: list[MovieRecord]) -> None:
        try:
            async with self.sessionmaker() as db:
                existing = await db.execute(
                    select(WatchedMovie.seq).where(WatchedMovie.movie_id == record.id)
                )
                if existing.scalar_one_or_none() is not None:
                    return
                db.add(WatchedMovie(
                    movie_id=record.id,
                    title=record.title,
                    image=record.image,
                    year=record.year,
                    date_added=record.date_added,
                ))
                await db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save '{record.title}': {e}") from e

    async def persist_remove(self, movie_id: str, snapshot: list[MovieRecord]) -> None:
        try:
            async with self.sessionmaker() as db:
                await db.execute(delete(WatchedMovie).where(WatchedMovie.movie_id == movie_id))
                await db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not remove {movie_id}: {e}") from e
