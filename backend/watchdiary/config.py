"""
Watch Diary — Application Configuration
Uses pydantic-settings for type-safe environment variable management.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Watch Diary"
    ENVIRONMENT: str = "development"  # "development" or "production"
    DEBUG: bool = False
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Database (only used when WATCHLIST_BACKEND == "sql")
    DATABASE_URL: str = "sqlite+aiosqlite:///./watch_diary.db"

    # Upstream search (key stays server-side)
    SEARCH_PROVIDER: str = "imdb"  # "imdb", "imdb_autocomplete" or "omdb"
    RAPIDAPI_KEY: str = ""
    RAPIDAPI_HOST: str = ""  # blank = provider default
    OMDB_API_KEY: str = ""
    SEARCH_REQUIRE_IMAGE: bool = True

    # Watchlist persistence boundary
    WATCHLIST_BACKEND: str = "sql"  # "sql", "file", "rest" or "memory"
    WATCHLIST_FILE: str = "./watchlist.json"
    BACKEND_URL: str = ""
    WATCHLIST_ROLLBACK_ON_FAILURE: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
