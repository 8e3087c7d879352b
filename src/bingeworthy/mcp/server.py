"""MCP server exposing content discovery tools."""

import asyncio
import json

from loguru import logger
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..api.app import build_services
from ..config import configure_logging, get_settings
from ..models.content import APIResponse, SearchFilters
from ..recommendations import RecommendationEngine
from ..search import ContentSearch

FILTER_PROPERTIES = {
    "type": {"type": "string", "description": "'movie' or 'tv'"},
    "genre": {"type": "string", "description": "Genre name, partial match (e.g., 'horror')"},
    "platform": {"type": "string", "description": "Streaming platform (e.g., 'Netflix')"},
    "language": {"type": "string", "description": "Language name or ISO code (e.g., 'hindi', 'HI')"},
    "country": {"type": "string", "description": "Country code (e.g., 'US')"},
    "year": {"type": "integer", "description": "Release year, matched within one year"},
    "rating_min": {"type": "number", "description": "Minimum rating 0-10"},
}


def _text(payload) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


def _envelope(result: APIResponse) -> list[TextContent]:
    if not result.success:
        return [TextContent(type="text", text=f"Error: {result.error}")]
    return _text(result.to_dict())


def _filters_from(arguments: dict) -> SearchFilters:
    return SearchFilters.from_mapping(
        {name: arguments.get(name) for name in FILTER_PROPERTIES}
    )


def create_mcp_server(
    search: ContentSearch | None = None,
    recommender: RecommendationEngine | None = None,
) -> Server:
    """Create and configure the MCP server."""
    server = Server("bingeworthy")
    if search is None or recommender is None:
        built_search, built_recommender, _ = build_services(get_settings())
        search = search or built_search
        recommender = recommender or built_recommender

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(
                name="search_content",
                description="Search movies and TV shows by free-text query with optional filters. Category queries like 'top horror movies' browse highest-rated titles.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search query (max 100 characters)",
                        },
                        **FILTER_PROPERTIES,
                    },
                    "required": ["query"],
                },
            ),
            Tool(
                name="get_trending_content",
                description="Get trending movies and TV shows, best rated first",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "time_window": {
                            "type": "string",
                            "description": "'day' or 'week' (default week)",
                        },
                        "page": {
                            "type": "integer",
                            "description": "Page number 1-100 (default 1)",
                        },
                    },
                },
            ),
            Tool(
                name="get_content_details",
                description="Get full details for a movie or TV show, including cast, trailer and streaming platforms",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "content_id": {
                            "type": "integer",
                            "description": "TMDb ID",
                        },
                        "type": {
                            "type": "string",
                            "description": "'movie' or 'tv'",
                        },
                    },
                    "required": ["content_id", "type"],
                },
            ),
            Tool(
                name="get_recommendations",
                description="Get AI recommendations. Supports prompts like 'List top 5 best horror movies'.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "What to recommend",
                        },
                        "max_recommendations": {
                            "type": "integer",
                            "description": "Maximum number of recommendations (default 50)",
                        },
                    },
                    "required": ["query"],
                },
            ),
            Tool(
                name="suggest_search_titles",
                description="Suggest specific titles to search for, given a theme",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Theme or keywords (e.g., 'korean thrillers')",
                        },
                        "type": {
                            "type": "string",
                            "description": "Restrict to 'movie' or 'tv'",
                        },
                    },
                    "required": ["query"],
                },
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        logger.info(f"Tool call: {name}")
        try:
            if name == "search_content":
                query = arguments["query"].strip()
                if not query or len(query) > 100:
                    return [TextContent(type="text", text="Error: query must be 1-100 characters")]
                result = await search.search_content(query, _filters_from(arguments))
                return _envelope(result)

            elif name == "get_trending_content":
                time_window = arguments.get("time_window", "week")
                page = arguments.get("page", 1)
                if time_window not in ("day", "week"):
                    return [TextContent(type="text", text="Error: Invalid time_window")]
                if not 1 <= page <= 100:
                    return [TextContent(type="text", text="Error: Page must be between 1 and 100")]
                return _envelope(await search.fetch_trending(time_window, page))

            elif name == "get_content_details":
                media_type = arguments["type"]
                if media_type not in ("movie", "tv"):
                    return [TextContent(type="text", text="Error: type must be 'movie' or 'tv'")]
                result = await search.fetch_content_details(
                    int(arguments["content_id"]), media_type
                )
                return _envelope(result)

            elif name == "get_recommendations":
                query = arguments["query"].strip()
                limit = arguments.get("max_recommendations", 50)
                recommendations = await recommender.generate(query, limit)
                return _text([r.to_dict() for r in recommendations])

            elif name == "suggest_search_titles":
                query = arguments["query"].strip()
                filters = SearchFilters(type=arguments.get("type", ""))
                titles = await recommender.search_titles(query, filters)
                return _text({"query": query, "titles": titles})

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]

    return server


async def main():
    """Run the MCP server."""
    configure_logging(get_settings().log_level)
    server = create_mcp_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
