"""
Watch Diary — Upstream Movie Search Service
Calls the configured movie-metadata search API server-side so the API key
is never shipped to the browser.
"""

import httpx
import logging
from dataclasses import dataclass
from typing import Optional

from watchdiary.config import Settings
from watchdiary.schemas import MovieRecord
from watchdiary.services.normalizer import normalize

logger = logging.getLogger(__name__)


class UpstreamSearchError(Exception):
    """The search API could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# provider -> (base url, path, query param, default RapidAPI host)
PROVIDERS = {
    "imdb": ("https://imdb-com.p.rapidapi.com", "/search", "searchTerm", "imdb-com.p.rapidapi.com"),
    "imdb_autocomplete": ("https://imdb8.p.rapidapi.com", "/auto-complete", "q", "imdb8.p.rapidapi.com"),
    "omdb": ("https://www.omdbapi.com", "/", "s", None),
}


@dataclass(frozen=True)
class SearchConfig:
    provider: str = "imdb"
    api_key: str = ""
    host: str = ""
    require_image: bool = True
    timeout: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchConfig":
        provider = settings.SEARCH_PROVIDER
        api_key = settings.OMDB_API_KEY if provider == "omdb" else settings.RAPIDAPI_KEY
        return cls(
            provider=provider,
            api_key=api_key,
            host=settings.RAPIDAPI_HOST,
            require_image=settings.SEARCH_REQUIRE_IMAGE,
        )


class MovieSearchService:
    """Search client for one upstream provider."""

    def __init__(self, config: SearchConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        if config.provider not in PROVIDERS:
            raise ValueError(f"Unknown search provider: {config.provider!r}")
        self.config = config
        self._transport = transport
        base, path, param, default_host = PROVIDERS[config.provider]
        self.base_url = base
        self.path = path
        self.query_param = param
        self.host = config.host or default_host

    def _build_request(self, query: str) -> tuple[dict, dict]:
        params = {self.query_param: query}
        headers = {"accept": "application/json"}
        if self.config.provider == "omdb":
            params["apikey"] = self.config.api_key
        else:
            headers["x-rapidapi-host"] = self.host
            headers["x-rapidapi-key"] = self.config.api_key
        return params, headers

    async def fetch_raw(self, query: str):
        """GET the provider's search endpoint and return the decoded body."""
        params, headers = self._build_request(query)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(self.path, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Search request failed ({self.config.provider}): {e}")
            raise UpstreamSearchError(f"Search request failed: {e}") from e

        if resp.status_code == 401 or resp.status_code == 403:
            logger.critical(f"⚠️ {self.config.provider} API key rejected!")
        if not resp.is_success:
            logger.warning(f"Search API returned {resp.status_code} for '{query}'")
            raise UpstreamSearchError(
                f"Search API error: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError:
            logger.warning("Search API returned a non-JSON body")
            return None

    async def search(self, query: str) -> list[MovieRecord]:
        """Search upstream and normalize. Blank queries never hit the network."""
        query = query.strip()
        if not query:
            return []

        raw = await self.fetch_raw(query)
        results = normalize(raw, require_image=self.config.require_image)
        logger.info(f"🔎 '{query}' → {len(results)} results")
        return results
