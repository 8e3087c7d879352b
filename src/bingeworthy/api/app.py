"""FastAPI application exposing search, trending, details and recommendations."""

from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from ..config import Settings, configure_logging, get_settings
from ..interpreter import QueryInterpreter
from ..models.content import SearchFilters
from ..recommendations import RecommendationEngine
from ..search import ContentSearch
from ..services.llm import LLMService
from ..services.omdb import OMDbService
from ..services.tmdb import TMDbService

MAX_QUERY_LENGTH = 100

SEARCH_CACHE = "public, s-maxage=1800, stale-while-revalidate=3600"
TRENDING_CACHE = "public, s-maxage=3600, stale-while-revalidate=86400"
DETAILS_CACHE = "public, s-maxage=7200, stale-while-revalidate=86400"


class RecommendationRequest(BaseModel):
    query: str = ""
    type: Optional[str] = None
    filters: Optional[dict[str, Any]] = None
    max_recommendations: int = Field(50, alias="maxRecommendations", ge=1, le=100)


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def _parse_year(value: str | None) -> int | None:
    try:
        year = int(value) if value else None
    except ValueError:
        return None
    if year is not None and 1900 <= year <= date.today().year + 5:
        return year
    return None


def _parse_rating(value: str | None) -> float | None:
    try:
        rating = float(value) if value else None
    except ValueError:
        return None
    if rating is not None and 0 <= rating <= 10:
        return rating
    return None


def build_services(settings: Settings) -> tuple[ContentSearch, RecommendationEngine, list]:
    """Wire service clients from settings. Returns closables alongside."""
    tmdb = TMDbService(
        api_key=settings.tmdb_api_key,
        read_access_token=settings.tmdb_read_access_token,
    )
    llm = LLMService(
        huggingface_api_key=settings.huggingface_api_key,
        mistral_api_key=settings.mistral_api_key,
    )
    omdb = OMDbService(api_key=settings.omdb_api_key) if settings.omdb_api_key else None
    search = ContentSearch(
        tmdb=tmdb,
        interpreter=QueryInterpreter(llm=llm),
        omdb=omdb,
        configured=settings.tmdb_configured,
        watch_region=settings.watch_region,
        max_search_pages=settings.max_search_pages,
    )
    closables = [svc for svc in (tmdb, llm, omdb) if svc is not None]
    return search, RecommendationEngine(llm=llm), closables


def create_app(
    settings: Settings | None = None,
    search: ContentSearch | None = None,
    recommender: RecommendationEngine | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    closables: list = []
    if search is None or recommender is None:
        built_search, built_recommender, closables = build_services(settings)
        search = search or built_search
        recommender = recommender or built_recommender

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("bingeworthy API ready")
        yield
        for svc in closables:
            await svc.close()
        logger.info("bingeworthy API stopped")

    app = FastAPI(title="bingeworthy API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.search = search
    app.state.recommender = recommender

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"Unhandled error on {request.url.path}")
        return error_response("Internal server error", 500)

    @app.get("/health")
    async def health():
        return {"status": "ok", "tmdb_configured": search.configured}

    @app.get("/api/content/search")
    async def search_content(
        q: Optional[str] = Query(None, description="Search query"),
        type: str = "",
        genre: str = "",
        platform: str = "",
        language: str = "",
        country: str = "",
        year: Optional[str] = None,
        rating_min: Optional[str] = None,
    ):
        if not q or not q.strip():
            logger.warning("Search rejected: empty query")
            return error_response("Search query is required", 400)
        if len(q) > MAX_QUERY_LENGTH:
            logger.warning("Search rejected: query too long")
            return error_response(
                f"Search query too long (max {MAX_QUERY_LENGTH} characters)", 400
            )

        filters = SearchFilters(
            platform=platform,
            genre=genre,
            language=language,
            country=country,
            type=type,
            year=_parse_year(year),
            rating_min=_parse_rating(rating_min),
        )
        result = await search.search_content(q.strip(), filters)
        if not result.success:
            return error_response(result.error, 500)

        result.cached = True
        logger.info(f"Search API returning {len(result.data)} results")
        return JSONResponse(result.to_dict(), headers={"Cache-Control": SEARCH_CACHE})

    @app.get("/api/content/trending")
    async def trending(timeWindow: str = "week", page: str = "1"):
        if timeWindow not in ("day", "week"):
            return error_response("Invalid timeWindow parameter", 400)
        try:
            page_number = int(page)
        except ValueError:
            page_number = 0
        if page_number < 1 or page_number > 100:
            return error_response("Page must be between 1 and 100", 400)

        result = await search.fetch_trending(timeWindow, page_number)
        if not result.success:
            return error_response(result.error, 500)
        return JSONResponse(result.to_dict(), headers={"Cache-Control": TRENDING_CACHE})

    @app.get("/api/content/{content_id}")
    async def content_details(content_id: str, type: Optional[str] = None):
        try:
            parsed_id = int(content_id)
        except ValueError:
            parsed_id = 0
        if parsed_id <= 0:
            return error_response("Invalid content ID", 400)
        if type not in ("movie", "tv"):
            return error_response("Content type (movie or tv) is required", 400)

        result = await search.fetch_content_details(parsed_id, type)
        if not result.success:
            status = 404 if result.error == "Content not found" else 500
            return error_response(result.error, status)
        return JSONResponse(result.to_dict(), headers={"Cache-Control": DETAILS_CACHE})

    @app.post("/api/ai/recommendations")
    async def ai_recommendations(body: RecommendationRequest):
        query = body.query.strip()
        if len(query) < 3:
            return error_response("Query must be at least 3 characters long", 400)

        try:
            if body.type == "search_titles":
                filters = SearchFilters.from_mapping(body.filters)
                titles = await recommender.search_titles(query, filters)
                return {"success": True, "titles": titles, "query": query}

            recommendations = await recommender.generate(query, body.max_recommendations)
        except Exception:
            logger.exception("Error generating AI recommendations")
            return error_response("Failed to generate recommendations", 500)
        return {
            "success": True,
            "data": [r.to_dict() for r in recommendations],
            "query": query,
        }

    return app


def run() -> None:
    """Serve the API with uvicorn."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)
