"""
Watch Diary — Pydantic Schemas
Separate from SQLAlchemy models. Handles API validation & serialization.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator
from typing import Optional

NOT_AVAILABLE = "N/A"
UNKNOWN_TITLE = "Unknown Title"


# ─── Movie Schemas ────────────────────────────────────────

class MovieRecord(BaseModel):
    """Canonical movie record shared by search results and the watchlist."""

    id: str = NOT_AVAILABLE
    title: str = UNKNOWN_TITLE
    image: str = ""
    year: str = NOT_AVAILABLE
    date_added: Optional[datetime] = Field(default=None, alias="dateAdded")

    model_config = {"populate_by_name": True, "from_attributes": True}

    @field_validator("id", "year", mode="before")
    @classmethod
    def stringify(cls, v):
        """Upstream APIs send years (and occasionally ids) as numbers."""
        if v is None or v == "":
            return NOT_AVAILABLE
        return str(v)

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v):
        return UNKNOWN_TITLE if v is None or v == "" else v

    @field_validator("image", mode="before")
    @classmethod
    def default_image(cls, v):
        return "" if v is None else v

    @field_validator("date_added", mode="after")
    @classmethod
    def assume_utc(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_storage(self) -> dict:
        """Wire/storage form: camelCase keys, ISO timestamps, no empty dateAdded."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SearchHit(MovieRecord):
    in_watchlist: bool = False


# ─── API Response Wrappers ────────────────────────────────

class SearchResponse(BaseModel):
    query: str
    results: list[SearchHit] = Field(default_factory=list)
    message: Optional[str] = None


class HealthCheck(BaseModel):
    status: str = "ok"
    version: str = "1.0.0"
    storage: Optional[str] = None
