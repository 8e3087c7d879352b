"""Turn free-text queries into a search intent."""

import re

from attrs import define
from loguru import logger

from .catalog import LANGUAGE_CODES
from .errors import LLMError
from .models.content import SearchFilters
from .models.recommendation import SearchIntent
from .services.llm import LLMService

TOP_PATTERNS = [
    "top",
    "best",
    "highest rated",
    "greatest",
    "popular",
    "trending",
    "recommended",
]

GENRE_KEYWORDS = [
    "action",
    "comedy",
    "drama",
    "horror",
    "thriller",
    "romance",
    "sci-fi",
    "fantasy",
    "animation",
    "documentary",
]

PLATFORM_KEYWORDS = [
    "netflix",
    "hbo",
    "amazon prime",
    "disney",
    "apple tv",
    "paramount",
    "hulu",
    "zee5",
    "hotstar",
]

YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")


def parse_query(query: str, filters: SearchFilters | None = None) -> SearchIntent:
    """Rule-based interpretation of a search query.

    Starts from the caller's filters and layers on whatever the query text
    implies. Category-style queries ("top horror movies", "hindi shows")
    switch to discovery, everything else stays a title search.
    """
    text = query.lower().strip()
    derived = SearchFilters().merged(filters or SearchFilters())
    search_terms: str | None = query
    use_discover = False
    reasoning = "Using specific title search"

    has_top_pattern = any(p in text for p in TOP_PATTERNS)

    for name, code in LANGUAGE_CODES.items():
        if name in text:
            derived.language = code.upper()
            if f"{name} movies" in text or f"{name} shows" in text:
                use_discover = True
                reasoning = f"Language-specific content discovery for {name}"
                search_terms = None
            break

    for genre in GENRE_KEYWORDS:
        if genre in text:
            derived.genre = genre
            if has_top_pattern or f"{genre} movies" in text or f"{genre} shows" in text:
                use_discover = True
                reasoning = f"Genre-based discovery for {genre}"
                search_terms = None
            break

    for platform in PLATFORM_KEYWORDS:
        if platform in text:
            derived.platform = platform
            if has_top_pattern:
                use_discover = True
                reasoning = f"Platform-specific discovery for {platform}"
                search_terms = None
            break

    year_match = YEAR_PATTERN.search(text)
    if year_match:
        derived.year = int(year_match.group(0))

    if "movies" in text and "tv" not in text:
        derived.type = "movie"
    elif "shows" in text or "series" in text or "tv" in text:
        derived.type = "tv"

    if has_top_pattern and derived.active():
        use_discover = True
        reasoning = "Top-rated content discovery with filters"
        search_terms = None

    intent = SearchIntent(
        search_terms=search_terms,
        filters=derived,
        use_discover=use_discover,
        reasoning=reasoning,
    )
    logger.debug(f"Parsed '{query}': {intent}")
    return intent


def intent_from_llm(data: dict, query: str, filters: SearchFilters | None) -> SearchIntent:
    """Build an intent from the model's JSON, keeping caller filters on top."""
    if not isinstance(data, dict):
        raise LLMError("Model interpretation is not a JSON object")
    raw = data.get("filters") or {}
    if not isinstance(raw, dict):
        raise LLMError("Model filters are not a JSON object")
    llm_filters = SearchFilters()
    for name in ("genre", "language", "country", "platform", "type"):
        value = raw.get(name)
        if isinstance(value, str):
            setattr(llm_filters, name, value.strip())
    if llm_filters.type not in ("", "movie", "tv"):
        llm_filters.type = ""
    try:
        llm_filters.year = int(raw["year"]) if raw.get("year") else None
    except (TypeError, ValueError):
        llm_filters.year = None

    merged = llm_filters.merged(filters or SearchFilters())
    use_discover = bool(data.get("useDiscoverAPI"))
    terms = data.get("searchTerms")
    if not use_discover and not (isinstance(terms, str) and terms.strip()):
        terms = query
    return SearchIntent(
        search_terms=None if use_discover else terms.strip(),
        filters=merged,
        use_discover=use_discover,
        reasoning=str(data.get("reasoning") or "LLM interpretation"),
    )


@define
class QueryInterpreter:
    """Interprets queries with an LLM when one is configured, else by rules."""

    llm: LLMService | None = None

    async def interpret(self, query: str, filters: SearchFilters | None = None) -> SearchIntent:
        if self.llm is not None and self.llm.has_mistral:
            try:
                data = await self.llm.interpret_query(query)
                return intent_from_llm(data, query, filters)
            except LLMError as e:
                logger.warning(f"LLM interpretation failed, using rule-based parsing: {e}")
        return parse_query(query, filters)
