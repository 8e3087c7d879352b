"""AI recommendations with curated fallback tables."""

import random
import re
import time

from attrs import define
from loguru import logger

from .errors import LLMError
from .models.content import SearchFilters
from .models.recommendation import Recommendation
from .services.llm import LLMService

MAX_SEARCH_TITLES = 50

TOP_LIST_PATTERN = re.compile(
    r"(?:(?:list|show|give me|find)\s+)?(?:top\s+)?(\d+)?\s*"
    r"(?:best|top|greatest|most popular)\s+(.+?)\s*(?:movies?|tv shows?|series)",
    re.IGNORECASE,
)


def _recs(rows: list[tuple]) -> list[Recommendation]:
    return [Recommendation(*row) for row in rows]


TOP_LISTS: dict[str, list[Recommendation]] = {
    "action": _recs([
        ("a1", "Mad Max: Fury Road", "High-octane post-apocalyptic action masterpiece", "Action Movie", 0.95),
        ("a2", "John Wick", "Stylish revenge thriller with incredible choreography", "Action Movie", 0.92),
        ("a3", "The Raid", "Indonesian martial arts action film with brutal intensity", "Action Movie", 0.9),
        ("a4", "Mission: Impossible - Fallout", "Tom Cruise's most dangerous stunts in this spy thriller", "Action Movie", 0.89),
        ("a5", "Daredevil", "Netflix's gritty superhero series with amazing fight scenes", "Action Series", 0.87),
    ]),
    "horror": _recs([
        ("h1", "Hereditary", "Psychological horror that redefines family trauma", "Horror Movie", 0.94),
        ("h2", "The Conjuring", "Classic supernatural horror with perfect atmosphere", "Horror Movie", 0.91),
        ("h3", "Get Out", "Social thriller that revolutionized horror cinema", "Horror Movie", 0.93),
        ("h4", "The Haunting of Hill House", "Netflix's masterful horror series about family and ghosts", "Horror Series", 0.9),
        ("h5", "Midsommar", "Disturbing folk horror set in broad daylight", "Horror Movie", 0.88),
    ]),
    "comedy": _recs([
        ("c1", "The Grand Budapest Hotel", "Wes Anderson's whimsical comedy masterpiece", "Comedy Movie", 0.92),
        ("c2", "Brooklyn Nine-Nine", "Perfect workplace comedy with diverse cast", "Comedy Series", 0.9),
        ("c3", "Parasite", "Dark comedy thriller about class warfare", "Comedy-Thriller", 0.95),
        ("c4", "Schitt's Creek", "Heartwarming comedy about family and growth", "Comedy Series", 0.89),
        ("c5", "What We Do in the Shadows", "Vampire mockumentary series that's absolutely hilarious", "Comedy Series", 0.87),
    ]),
    "drama": _recs([
        ("d1", "Breaking Bad", "The ultimate character transformation drama", "Crime Drama", 0.97),
        ("d2", "The Godfather", "Epic crime saga that defined cinema", "Drama Movie", 0.96),
        ("d3", "Better Call Saul", "Breaking Bad prequel with incredible character depth", "Crime Drama", 0.94),
        ("d4", "Moonlight", "Coming-of-age drama with beautiful cinematography", "Drama Movie", 0.93),
        ("d5", "The Crown", "Royal family drama with stunning production values", "Historical Drama", 0.91),
    ]),
    "sci-fi": _recs([
        ("s1", "Blade Runner 2049", "Visually stunning cyberpunk masterpiece", "Sci-Fi Movie", 0.94),
        ("s2", "The Expanse", "Hard science fiction with realistic space politics", "Sci-Fi Series", 0.92),
        ("s3", "Arrival", "Thoughtful alien contact film about communication", "Sci-Fi Movie", 0.91),
        ("s4", "Black Mirror", "Anthology series exploring technology's dark side", "Sci-Fi Series", 0.9),
        ("s5", "Dune", "Epic space opera with incredible world-building", "Sci-Fi Movie", 0.89),
    ]),
    "netflix": _recs([
        ("n1", "Stranger Things", "80s nostalgia meets supernatural horror", "Netflix Original", 0.93),
        ("n2", "The Queen's Gambit", "Chess prodigy's journey through addiction and genius", "Netflix Original", 0.92),
        ("n3", "Ozark", "Money laundering family drama in the Missouri Ozarks", "Netflix Original", 0.9),
        ("n4", "Mindhunter", "FBI profilers study serial killers in the 1970s", "Netflix Original", 0.89),
        ("n5", "Dark", "German time-travel thriller with complex storytelling", "Netflix Original", 0.88),
    ]),
}

MOCK_RECOMMENDATIONS: dict[str, list[Recommendation]] = {
    "netflix": _recs([
        ("1", "Stranger Things", "Supernatural thriller series set in the 1980s with great character development", "Netflix Original", 0.9),
        ("2", "The Crown", "Historical drama about the British Royal Family with excellent production values", "Netflix Original", 0.85),
    ]),
    "hbo": _recs([
        ("3", "Game of Thrones", "Epic fantasy series with complex characters and political intrigue", "HBO Original", 0.9),
        ("4", "The Last of Us", "Post-apocalyptic drama based on the popular video game", "HBO Original", 0.88),
    ]),
    "sci-fi": _recs([
        ("5", "Blade Runner 2049", "Visually stunning sequel to the classic cyberpunk film", "Sci-Fi Movie", 0.92),
        ("6", "The Expanse", "Hard science fiction series with realistic space politics", "Sci-Fi Series", 0.87),
    ]),
    "thriller": _recs([
        ("7", "Mindhunter", "Psychological crime series about FBI profilers studying serial killers", "Crime Thriller", 0.89),
        ("8", "Gone Girl", "Psychological thriller about a missing wife and suspicious husband", "Psychological Thriller", 0.86),
    ]),
    "comedy": _recs([
        ("9", "The Office", "Mockumentary sitcom about office workers with great character humor", "Comedy Series", 0.91),
        ("10", "Brooklyn Nine-Nine", "Police procedural comedy with diverse cast and clever writing", "Comedy Series", 0.84),
    ]),
    "ryan gosling": _recs([
        ("11", "La La Land", "Musical romantic drama about aspiring artists in Los Angeles", "Musical Drama", 0.93),
        ("12", "Drive", "Neo-noir action film with stylish cinematography and minimal dialogue", "Action Thriller", 0.88),
    ]),
}

DEFAULT_RECOMMENDATIONS = _recs([
    ("13", "Breaking Bad", "Crime drama about a chemistry teacher turned methamphetamine manufacturer", "Crime Drama", 0.95),
    ("14", "The Mandalorian", "Star Wars series following a bounty hunter in the outer rim", "Sci-Fi Adventure", 0.87),
    ("15", "Parasite", "Korean thriller about class conflict and social inequality", "International Thriller", 0.94),
])

TITLE_SUGGESTIONS: dict[str, list[str]] = {
    "action": [
        "Mad Max: Fury Road", "John Wick", "The Dark Knight", "Mission: Impossible - Fallout",
        "Avengers: Endgame", "Die Hard", "The Matrix", "Terminator 2: Judgment Day", "Heat",
        "Casino Royale",
    ],
    "horror": [
        "Hereditary", "The Conjuring", "Get Out", "A Quiet Place", "The Babadook", "It Follows",
        "Midsommar", "The Witch", "Sinister", "Insidious",
    ],
    "comedy": [
        "The Grand Budapest Hotel", "Parasite", "Knives Out", "The Big Lebowski", "Superbad",
        "Anchorman", "Borat", "Tropic Thunder", "Wedding Crashers", "Zoolander",
    ],
    "drama": [
        "The Godfather", "Shawshank Redemption", "Goodfellas", "Pulp Fiction",
        "There Will Be Blood", "No Country for Old Men", "Moonlight", "Manchester by the Sea",
        "Lady Bird", "Call Me by Your Name",
    ],
    "sci-fi": [
        "Blade Runner 2049", "Arrival", "Interstellar", "Ex Machina", "Her", "Dune",
        "The Martian", "Gravity", "Inception", "2001: A Space Odyssey",
    ],
    "netflix": [
        "Stranger Things", "The Crown", "Ozark", "Mindhunter", "Dark", "The Queen's Gambit",
        "Bridgerton", "Money Heist", "Narcos", "House of Cards",
    ],
    "hbo": [
        "Game of Thrones", "The Last of Us", "Succession", "True Detective", "Westworld",
        "The Sopranos", "The Wire", "Barry", "Euphoria", "Mare of Easttown",
    ],
    "marvel": [
        "Avengers: Endgame", "Black Panther", "Spider-Man: Into the Spider-Verse", "Iron Man",
        "Captain America: The Winter Soldier", "Thor: Ragnarok", "Guardians of the Galaxy",
        "Doctor Strange", "WandaVision", "Loki",
    ],
    "korean": [
        "Parasite", "Squid Game", "Train to Busan", "Oldboy", "The Handmaiden", "Burning",
        "Kingdom", "Crash Landing on You", "Goblin", "Reply 1988",
    ],
    "british period": [
        "The Crown", "Downton Abbey", "Bridgerton", "Outlander", "Poldark", "Victoria",
        "Anne with an E", "Pride and Prejudice", "Sense and Sensibility", "Emma",
    ],
    "true crime": [
        "Making a Murderer", "The Staircase", "Wild Wild Country", "Tiger King", "The Jinx",
        "Serial", "Mindhunter", "Zodiac", "The Night Stalker", "Don't F**k with Cats",
    ],
}

POPULAR_TITLES = [
    "The Shawshank Redemption", "The Godfather", "The Dark Knight", "Breaking Bad",
    "Game of Thrones", "Stranger Things", "Pulp Fiction", "The Lord of the Rings", "Inception",
    "The Matrix", "Goodfellas", "The Sopranos", "True Detective", "Fargo", "Better Call Saul",
]

TV_TITLES = frozenset([
    "Breaking Bad", "Game of Thrones", "Stranger Things", "The Sopranos", "True Detective",
    "Better Call Saul", "The Crown", "Ozark", "Mindhunter", "Dark", "Bridgerton", "Money Heist",
    "Narcos", "House of Cards", "Succession", "The Last of Us", "Westworld", "The Wire", "Barry",
    "Euphoria", "WandaVision", "Loki", "Squid Game", "Kingdom", "Crash Landing on You", "Goblin",
    "Reply 1988", "Downton Abbey", "Outlander", "Poldark", "Victoria", "Anne with an E",
    "Making a Murderer", "The Staircase", "Wild Wild Country", "Tiger King", "The Jinx", "Serial",
    "The Night Stalker", "Don't F**k with Cats", "Fargo", "Mare of Easttown",
])


def _unique(titles: list[str]) -> list[str]:
    return list(dict.fromkeys(titles))


def top_list(category: str, count: int) -> list[Recommendation]:
    """Curated "best of" entries for a category, best first."""
    category = category.lower().strip()
    for key, entries in TOP_LISTS.items():
        if key in category or category in key:
            return entries[:count]
    everything = [rec for entries in TOP_LISTS.values() for rec in entries]
    everything.sort(key=lambda r: r.confidence, reverse=True)
    return everything[:count]


def mock_recommendations(query: str, max_recommendations: int) -> list[Recommendation]:
    query = query.lower()
    selected = [
        rec
        for key, entries in MOCK_RECOMMENDATIONS.items()
        if key in query
        for rec in entries
    ]
    if not selected:
        selected = list(DEFAULT_RECOMMENDATIONS)
    random.shuffle(selected)
    return selected[:max_recommendations]


def static_search_titles(query: str, filters: SearchFilters | None = None) -> list[str]:
    """Titles to seed a search, picked by keywords in the query."""
    query = query.lower()
    titles = []
    for key, suggestions in TITLE_SUGGESTIONS.items():
        if key in query or any(word in query for word in key.split()):
            titles.extend(suggestions)
    if not titles:
        titles = list(POPULAR_TITLES)
    return _filter_by_type(titles, filters)


def _filter_by_type(titles: list[str], filters: SearchFilters | None) -> list[str]:
    wanted = filters.type if filters else ""
    if wanted == "movie":
        titles = [t for t in titles if t not in TV_TITLES]
    elif wanted == "tv":
        titles = [t for t in titles if t in TV_TITLES]
    return _unique(titles)[:MAX_SEARCH_TITLES]


@define
class RecommendationEngine:
    """Generates recommendations, preferring a configured LLM."""

    llm: LLMService | None = None

    async def generate(self, query: str, max_recommendations: int = 50) -> list[Recommendation]:
        """Recommendations for a query.

        "List top 5 best horror movies" style prompts get a ranked top list of
        the requested size; anything else gets keyword-matched picks.
        """
        match = TOP_LIST_PATTERN.search(query)
        if not match:
            return mock_recommendations(query, max_recommendations)

        count = int(match.group(1)) if match.group(1) else max_recommendations
        category = match.group(2).strip()
        logger.info(f"Top list request: {count} x '{category}'")

        if self.llm is not None and self.llm.has_huggingface:
            try:
                return await self._llm_top_list(query, category, count)
            except LLMError as e:
                logger.warning(f"LLM recommendations failed, using curated lists: {e}")
        return top_list(category, count)

    async def _llm_top_list(self, query: str, category: str, count: int) -> list[Recommendation]:
        items = await self.llm.rank_recommendations(query, category, count)
        if not items:
            raise LLMError("Could not parse AI response")
        stamp = int(time.time() * 1000)
        recs = []
        for index, item in enumerate(items[:count]):
            try:
                confidence = float(item.get("confidence") or 0.8)
            except (TypeError, ValueError):
                confidence = 0.8
            recs.append(
                Recommendation(
                    id=f"ai_{stamp}_{index}",
                    title=str(item.get("title") or f"Recommendation {index + 1}"),
                    description=str(item.get("description") or "AI-generated recommendation"),
                    category=str(item.get("category") or category),
                    confidence=confidence,
                )
            )
        return recs

    async def search_titles(self, query: str, filters: SearchFilters | None = None) -> list[str]:
        """Candidate titles to feed into title search."""
        if self.llm is not None and self.llm.has_mistral:
            try:
                items = await self.llm.suggest_titles(query)
                wanted = filters.type if filters else ""
                titles = [
                    item["title"].strip()
                    for item in items
                    if not wanted or item.get("category") in (None, wanted)
                ]
                if titles:
                    return _unique(titles)[:MAX_SEARCH_TITLES]
            except LLMError as e:
                logger.warning(f"LLM title suggestions failed, using curated titles: {e}")
        return static_search_titles(query, filters)
