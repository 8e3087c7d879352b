"""Client-side filtering and ordering of merged search results."""

from loguru import logger

from .catalog import language_code
from .models.content import Content, SearchFilters


def _matches_language(item: Content, wanted: str) -> bool:
    item_language = item.language.strip().upper()
    if item_language == wanted.strip().upper():
        return True
    return language_code(wanted).upper() == item_language


def _matches_platform(item: Content, wanted: str) -> bool:
    wanted = wanted.strip().lower()
    for platform in item.streaming_platforms:
        platform = platform.lower()
        if wanted in platform or platform in wanted:
            return True
    return False


def matches(item: Content, filters: SearchFilters) -> bool:
    """True when ``item`` passes every set filter."""
    if filters.type.strip() and item.type != filters.type.strip():
        return False

    if filters.genre.strip():
        genre = filters.genre.strip().lower()
        if not any(genre in g.lower() for g in item.genres):
            return False

    if filters.language.strip() and not _matches_language(item, filters.language):
        return False

    if filters.country.strip():
        if item.country.strip().upper() != filters.country.strip().upper():
            return False

    if filters.platform.strip() and not _matches_platform(item, filters.platform):
        return False

    if filters.rating_min and filters.rating_min > 0:
        if item.tmdb_rating < filters.rating_min and item.imdb_rating < filters.rating_min:
            return False

    if filters.year and filters.year > 1900:
        # One year of slack for festival vs. wide release dates.
        if item.release_year is None or abs(item.release_year - filters.year) > 1:
            return False

    return True


def apply_filters(items: list[Content], filters: SearchFilters | None) -> list[Content]:
    if filters is None or not filters.active():
        return list(items)
    filtered = [item for item in items if matches(item, filters)]
    logger.debug(f"Filtered {len(items)} items to {len(filtered)} with {filters.active()}")
    return filtered


def sort_by_rating(items: list[Content]) -> list[Content]:
    """TMDb rating descending, IMDb rating breaking ties."""
    return sorted(items, key=lambda c: (c.tmdb_rating, c.imdb_rating), reverse=True)
