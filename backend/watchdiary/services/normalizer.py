"""
Watch Diary — Search Result Normalizer
Maps the upstream search payloads we know about into MovieRecord lists.

Supported shapes:
    main_search    {"data": {"mainSearch": {"edges": [{"node": {"entity": {...}}}]}}}
    auto_complete  {"d": [{"id", "l", "i": {"imageUrl"}, "y"}]}
    omdb           {"Search": [{"imdbID", "Title", "Poster", "Year"}]}

Anything else normalizes to an empty list.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from watchdiary.schemas import MovieRecord, NOT_AVAILABLE, UNKNOWN_TITLE

logger = logging.getLogger(__name__)


class SearchShape(str, Enum):
    MAIN_SEARCH = "main_search"
    AUTO_COMPLETE = "auto_complete"
    OMDB = "omdb"


def _dig(obj: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a key is missing."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _first(*values: Any, default: str) -> str:
    for value in values:
        if value is not None and value != "":
            return str(value)
    return default


def _main_search_entries(raw: dict) -> Optional[list]:
    edges = _dig(raw, "data", "mainSearch", "edges")
    return edges if isinstance(edges, list) else None


def _map_main_search(item: dict) -> MovieRecord:
    entity = _dig(item, "node", "entity")
    if not isinstance(entity, dict):
        entity = {}
    return MovieRecord(
        id=_first(entity.get("id"), default=NOT_AVAILABLE),
        title=_first(
            _dig(entity, "titleText", "originalTitleText", "text"),
            _dig(entity, "originalTitleText", "text"),
            _dig(entity, "titleText", "text"),
            default=UNKNOWN_TITLE,
        ),
        image=_first(_dig(entity, "primaryImage", "url"), default=""),
        year=_first(_dig(entity, "releaseYear", "year"), default=NOT_AVAILABLE),
    )


def _auto_complete_entries(raw: dict) -> Optional[list]:
    entries = raw.get("d")
    return entries if isinstance(entries, list) else None


def _map_auto_complete(item: dict) -> MovieRecord:
    return MovieRecord(
        id=_first(item.get("id"), default=NOT_AVAILABLE),
        title=_first(item.get("l"), default=UNKNOWN_TITLE),
        image=_first(_dig(item, "i", "imageUrl"), default=""),
        year=_first(item.get("y"), default=NOT_AVAILABLE),
    )


def _omdb_entries(raw: dict) -> Optional[list]:
    entries = raw.get("Search")
    return entries if isinstance(entries, list) else None


def _map_omdb(item: dict) -> MovieRecord:
    poster = item.get("Poster")
    # OMDb uses the literal "N/A" for missing posters
    if poster == NOT_AVAILABLE:
        poster = None
    return MovieRecord(
        id=_first(item.get("imdbID"), default=NOT_AVAILABLE),
        title=_first(item.get("Title"), default=UNKNOWN_TITLE),
        image=_first(poster, default=""),
        year=_first(item.get("Year"), default=NOT_AVAILABLE),
    )


# Detection order matters: the first shape whose entry list is present wins.
_SHAPES: list[tuple[SearchShape, Callable[[dict], Optional[list]], Callable[[dict], MovieRecord]]] = [
    (SearchShape.MAIN_SEARCH, _main_search_entries, _map_main_search),
    (SearchShape.AUTO_COMPLETE, _auto_complete_entries, _map_auto_complete),
    (SearchShape.OMDB, _omdb_entries, _map_omdb),
]


def detect_shape(raw: Any) -> Optional[SearchShape]:
    """Return which known shape `raw` matches, or None."""
    if not isinstance(raw, dict):
        return None
    for shape, entries, _ in _SHAPES:
        if entries(raw) is not None:
            return shape
    return None


def normalize(raw: Any, require_image: bool = False) -> list[MovieRecord]:
    """
    Normalize an upstream search payload.

    Args:
        raw: Decoded JSON body from the search API (any shape)
        require_image: Drop records whose image resolved to ""

    Returns:
        MovieRecords in upstream order. Unknown shapes give [] rather than
        raising; no dedup happens here.
    """
    if not isinstance(raw, dict):
        return []

    for shape, entries, mapper in _SHAPES:
        items = entries(raw)
        if items is None:
            continue

        records = [mapper(item) for item in items if isinstance(item, dict)]
        if require_image:
            records = [r for r in records if r.image]
        logger.debug(f"Normalized {len(records)}/{len(items)} {shape.value} entries")
        return records

    logger.debug(f"Unrecognized search payload (keys: {sorted(raw)[:5]})")
    return []
