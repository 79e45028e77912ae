"""
Watch Diary — Database Connection
Async SQLAlchemy 2.0. PostgreSQL in production, SQLite locally.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from watchdiary.config import get_settings

settings = get_settings()


def make_engine(url: str, echo: bool = False):
    """Create an async engine; pool sizing only applies to server databases."""
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=5, max_overflow=10)
    return create_async_engine(url, **kwargs)


def make_sessionmaker(bind) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
async_session = make_sessionmaker(engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def init_db(bind=None):
    """Create all tables. Called on startup."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
