"""TMDb API service for catalog search, discovery and detail lookups."""

import httpx
from attrs import define
from loguru import logger

from ..catalog import genre_id_for, language_code
from ..errors import ContentNotFoundError, UpstreamAuthError, UpstreamError
from ..models.content import SearchFilters

AUTH_FAILED_MESSAGE = (
    "API authentication failed. Please check your TMDB API key is valid and active."
)


@define
class TMDbService:
    """Client for TMDb API."""

    api_key: str | None = None
    read_access_token: str | None = None
    base_url: str = "https://api.themoviedb.org/3"
    _client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            params = {}
            if self.read_access_token:
                headers["Authorization"] = f"Bearer {self.read_access_token}"
            elif self.api_key:
                params["api_key"] = self.api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict | None = None) -> dict:
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.RequestError as e:
            logger.error(f"TMDb request to {path} failed: {e}")
            raise UpstreamError(f"API request failed: {e}") from e

        if resp.status_code == 401:
            logger.error(f"TMDb rejected credentials for {path}")
            raise UpstreamAuthError(AUTH_FAILED_MESSAGE, status_code=401)
        if resp.status_code == 404:
            raise ContentNotFoundError("Content not found", status_code=404)
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"TMDb {path} returned {resp.status_code}: {resp.text[:200]}")
            raise UpstreamError(
                f"API request failed: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            ) from e
        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"TMDb {path} returned a non-JSON body")
            raise UpstreamError("API request failed: invalid JSON") from e
        if not isinstance(data, dict):
            raise UpstreamError("API request failed: invalid JSON")
        return data

    async def search(self, media_type: str, query: str, page: int = 1) -> list[dict]:
        """Search movies or TV shows by title, one page at a time."""
        logger.debug(f"Searching {media_type} '{query}' page {page}")
        data = await self._get(
            f"/search/{media_type}",
            params={"query": query, "include_adult": "false", "page": page},
        )
        return data.get("results") or []

    async def discover(
        self, media_type: str, filters: SearchFilters, page: int = 1
    ) -> list[dict]:
        """Browse highest-rated titles matching category filters."""
        params: dict = {
            "sort_by": "vote_average.desc",
            "vote_count.gte": 100,
            "page": page,
        }
        if filters.language:
            params["with_original_language"] = language_code(filters.language)
        if filters.year:
            if media_type == "movie":
                params["primary_release_year"] = filters.year
            else:
                params["first_air_date_year"] = filters.year
        if filters.genre:
            genre_id = genre_id_for(filters.genre, media_type)
            if genre_id is not None:
                params["with_genres"] = genre_id

        logger.debug(f"Discovering {media_type} page {page} with {params}")
        data = await self._get(f"/discover/{media_type}", params=params)
        return data.get("results") or []

    async def trending(
        self, media_type: str, time_window: str = "week", page: int = 1
    ) -> list[dict]:
        """Get trending titles for a day or week window."""
        data = await self._get(
            f"/trending/{media_type}/{time_window}", params={"page": page}
        )
        return data.get("results") or []

    async def details(self, media_type: str, content_id: int) -> dict:
        """Fetch full details including credits, videos and external ids."""
        return await self._get(
            f"/{media_type}/{content_id}",
            params={"append_to_response": "credits,videos,external_ids"},
        )

    async def watch_providers(self, media_type: str, content_id: int) -> dict:
        """Region-keyed streaming availability."""
        data = await self._get(f"/{media_type}/{content_id}/watch/providers")
        return data.get("results") or {}

    async def videos(self, media_type: str, content_id: int) -> list[dict]:
        data = await self._get(f"/{media_type}/{content_id}/videos")
        return data.get("results") or []

    async def validate_api_key(self) -> bool:
        """Check the configured credentials against /configuration."""
        try:
            await self._get("/configuration")
        except UpstreamError:
            return False
        return True
