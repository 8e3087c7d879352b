"""Search aggregation: interpret, fetch, enrich, filter and sort."""

import asyncio

from attrs import define, field
from loguru import logger

from .catalog import (
    genre_id_for,
    pick_trailer,
    provider_names,
    random_platforms,
    to_content,
    top_cast,
)
from .errors import BingeworthyError, ContentNotFoundError, UpstreamError
from .filters import apply_filters, sort_by_rating
from .interpreter import QueryInterpreter
from .models.content import APIResponse, Content, SearchFilters
from .models.recommendation import SearchIntent
from .services.omdb import OMDbService
from .services.tmdb import TMDbService

PAGE_SIZE = 20
MEDIA_TYPES = ("movie", "tv")

NOT_CONFIGURED_MESSAGE = (
    "TMDB API key is not configured. "
    "Please add your TMDB API key to environment variables."
)
NO_RESULTS_MESSAGE = (
    "No movies or TV shows found matching your search criteria. "
    "Try different keywords or remove some filters."
)


@define
class FetchResult:
    """Items gathered across pages plus any errors that stopped a loop."""

    items: list[Content] = field(factory=list)
    errors: list[str] = field(factory=list)


@define
class ContentSearch:
    """Answers search, trending and detail requests against TMDb."""

    tmdb: TMDbService
    interpreter: QueryInterpreter = field(factory=QueryInterpreter)
    omdb: OMDbService | None = None
    configured: bool = True
    watch_region: str = "US"
    max_search_pages: int = 500
    discover_max_pages: int = 10
    enrich_top_n: int = 5

    async def search_content(
        self, query: str, filters: SearchFilters | None = None
    ) -> APIResponse:
        """Find movies and TV shows for a free-text query."""
        filters = filters or SearchFilters()
        logger.info(f"Starting search for '{query}' with filters {filters.active()}")

        if not self.configured:
            logger.error("TMDb API key is not configured")
            return APIResponse.fail(NOT_CONFIGURED_MESSAGE)

        try:
            intent = await self.interpreter.interpret(query, filters)
            logger.info(f"Search intent: {intent.reasoning}")

            if intent.use_discover:
                fetched = await self.discover_content(intent)
            else:
                fetched = await self.search_titles(intent.search_terms or query)

            if not fetched.items and fetched.errors:
                logger.error(f"Search failed with errors: {fetched.errors}")
                return APIResponse.fail(fetched.errors[0])

            results = sort_by_rating(apply_filters(fetched.items, filters))
            logger.info(
                f"Search '{query}': {len(fetched.items)} fetched, {len(results)} after filtering"
            )
            if not results:
                return APIResponse.fail(NO_RESULTS_MESSAGE)
            return APIResponse.ok(results, message=f"Found {len(results)} results")
        except Exception as e:
            logger.exception(f"Search error for '{query}'")
            return APIResponse.fail(f"Search failed: {e}")

    async def search_titles(self, query: str) -> FetchResult:
        """Title search across every page, movies then TV shows."""
        result = FetchResult()
        for media_type in MEDIA_TYPES:
            await self._paginate(
                result,
                media_type,
                lambda page, mt=media_type: self.tmdb.search(mt, query, page),
                self.max_search_pages,
                enrich=True,
            )
        return result

    async def discover_content(self, intent: SearchIntent) -> FetchResult:
        """Category browse for the media types the intent allows."""
        result = FetchResult()
        media_types = (intent.filters.type,) if intent.filters.type in MEDIA_TYPES else MEDIA_TYPES
        for media_type in media_types:
            if intent.filters.genre and genre_id_for(intent.filters.genre, media_type) is None:
                logger.debug(f"No {media_type} genre matches '{intent.filters.genre}', skipping")
                continue
            await self._paginate(
                result,
                media_type,
                lambda page, mt=media_type: self.tmdb.discover(mt, intent.filters, page),
                self.discover_max_pages,
                enrich=False,
            )
        logger.info(f"Discovery found {len(result.items)} results")
        return result

    async def _paginate(self, result, media_type, fetch_page, max_pages, enrich) -> None:
        # Stops on the first short, empty or failed page.
        for page in range(1, max_pages + 1):
            try:
                records = await fetch_page(page)
            except UpstreamError as e:
                logger.error(f"{media_type} page {page} failed: {e}")
                result.errors.append(str(e))
                return
            logger.debug(f"{media_type} page {page}: {len(records)} records")
            if not records:
                return
            if enrich:
                result.items.extend(await self.convert_page(media_type, records))
            else:
                result.items.extend(to_content(media_type, r) for r in records)
            if len(records) < PAGE_SIZE:
                return

    async def convert_page(self, media_type: str, records: list[dict]) -> list[Content]:
        """Enrich the first few records with real data, the rest get placeholders."""
        head = records[: self.enrich_top_n]
        tail = records[self.enrich_top_n :]
        enriched = await asyncio.gather(*(self.enrich(media_type, r) for r in head))
        return list(enriched) + [to_content(media_type, r) for r in tail]

    async def enrich(self, media_type: str, record: dict) -> Content:
        platforms, trailer_url = await asyncio.gather(
            self.fetch_watch_providers(media_type, record["id"]),
            self.fetch_trailer_url(media_type, record["id"]),
        )
        content = to_content(media_type, record, platforms)
        content.trailer_url = trailer_url
        return content

    async def fetch_watch_providers(self, media_type: str, content_id: int) -> list[str]:
        """Real platform names for the configured region, random ones on failure."""
        try:
            regions = await self.tmdb.watch_providers(media_type, content_id)
        except UpstreamError as e:
            logger.warning(f"Watch providers failed for {media_type} {content_id}: {e}")
            return random_platforms()
        platforms = provider_names(regions.get(self.watch_region))
        return platforms or random_platforms()

    async def fetch_trailer_url(self, media_type: str, content_id: int) -> str | None:
        try:
            videos = await self.tmdb.videos(media_type, content_id)
        except UpstreamError as e:
            logger.warning(f"Videos failed for {media_type} {content_id}: {e}")
            return None
        trailer = pick_trailer(videos)
        if trailer is None:
            logger.debug(f"No trailer found for {media_type} {content_id}")
        return trailer

    async def fetch_trending(self, time_window: str = "week", page: int = 1) -> APIResponse:
        """Top 20 trending movies and shows for the window, best rated first."""
        try:
            movies, shows = await asyncio.gather(
                self.tmdb.trending("movie", time_window, page),
                self.tmdb.trending("tv", time_window, page),
            )
        except UpstreamError as e:
            logger.error(f"Error fetching trending content: {e}")
            return APIResponse.fail("Failed to fetch trending content")

        items = [to_content("movie", m) for m in movies] + [to_content("tv", s) for s in shows]
        items.sort(key=lambda c: c.tmdb_rating, reverse=True)
        logger.info(f"Fetched {len(items)} trending items for {time_window} page {page}")
        return APIResponse.ok(items[:PAGE_SIZE])

    async def fetch_content_details(self, content_id: int, media_type: str) -> APIResponse:
        """Full record for one title, with cast, trailer, providers and ratings."""
        try:
            data = await self.tmdb.details(media_type, content_id)
        except ContentNotFoundError:
            return APIResponse.fail("Content not found")
        except UpstreamError as e:
            logger.error(f"Error fetching details for {media_type} {content_id}: {e}")
            return APIResponse.fail("Failed to fetch content details")

        content = to_content(media_type, data, await self.fetch_watch_providers(media_type, content_id))
        content.cast = top_cast(data.get("credits"))
        videos = (data.get("videos") or {}).get("results")
        if videos is not None:
            content.trailer_url = pick_trailer(videos)
        else:
            content.trailer_url = await self.fetch_trailer_url(media_type, content_id)

        imdb_id = data.get("imdb_id") or (data.get("external_ids") or {}).get("imdb_id")
        if self.omdb is not None and imdb_id:
            await self._apply_omdb_ratings(content, imdb_id)
        return APIResponse.ok(content)

    async def _apply_omdb_ratings(self, content: Content, imdb_id: str) -> None:
        try:
            imdb_rating, rotten = await self.omdb.get_ratings(imdb_id)
        except BingeworthyError as e:
            logger.warning(f"OMDb ratings unavailable for {imdb_id}: {e}")
            return
        if imdb_rating is not None:
            content.imdb_rating = imdb_rating
        content.rotten_tomatoes_rating = rotten
