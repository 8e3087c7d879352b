"""OMDb API service for IMDb and Rotten Tomatoes ratings."""

import httpx
from attrs import define
from loguru import logger

from ..errors import UpstreamError


@define
class OMDbService:
    """Client for OMDb API."""

    api_key: str
    _client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url="https://www.omdbapi.com",
                timeout=30.0,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_ratings(self, imdb_id: str) -> tuple[float | None, int | None]:
        """Return (IMDb rating out of 10, Rotten Tomatoes percentage)."""
        client = await self._get_client()
        try:
            resp = await client.get("/", params={"apikey": self.api_key, "i": imdb_id})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f"OMDb request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("OMDb returned invalid JSON") from e
        if not isinstance(data, dict):
            raise UpstreamError("OMDb returned invalid JSON")
        if data.get("Response") == "False":
            logger.debug(f"OMDb has no entry for {imdb_id}: {data.get('Error')}")
            return None, None

        return self._parse_imdb(data.get("imdbRating")), self._parse_rotten(
            data.get("Ratings", [])
        )

    def _parse_imdb(self, value: str | None) -> float | None:
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def _parse_rotten(self, ratings: list[dict]) -> int | None:
        for rating in ratings:
            if rating.get("Source") == "Rotten Tomatoes":
                try:
                    return int(rating.get("Value", "").rstrip("%"))
                except ValueError:
                    return None
        return None
