"""Lookup tables and conversion of TMDb records into Content."""

import random
from urllib.parse import quote

from .models.content import Content

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="

MOVIE_GENRES = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}

TV_GENRES = {
    10759: "Action & Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    10762: "Kids",
    9648: "Mystery",
    10763: "News",
    10764: "Reality",
    10765: "Sci-Fi & Fantasy",
    10766: "Soap",
    10767: "Talk",
    10768: "War & Politics",
    37: "Western",
}

# Colloquial names that don't appear verbatim in TMDb genre names.
GENRE_ALIASES = {
    "sci-fi": {"movie": "science fiction", "tv": "sci-fi"},
    "scifi": {"movie": "science fiction", "tv": "sci-fi"},
    "science fiction": {"movie": "science fiction", "tv": "sci-fi"},
}

LANGUAGE_CODES = {
    "hindi": "hi",
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "italian": "it",
    "japanese": "ja",
    "korean": "ko",
    "chinese": "zh",
    "portuguese": "pt",
    "russian": "ru",
    "arabic": "ar",
    "tamil": "ta",
    "telugu": "te",
    "bengali": "bn",
    "marathi": "mr",
    "gujarati": "gu",
    "punjabi": "pa",
    "malayalam": "ml",
    "kannada": "kn",
}

STREAMING_PLATFORMS = [
    "Netflix",
    "HBO Max",
    "Amazon Prime",
    "Disney+",
    "Apple TV+",
    "Paramount+",
    "Hulu",
    "Peacock",
    "Zee5",
    "Hotstar",
]

PLACEHOLDER_PLATFORMS = STREAMING_PLATFORMS[:7]

STATUS_MAP = {
    "released": "released",
    "ended": "released",
    "returning series": "released",
    "canceled": "released",
    "cancelled": "released",
    "in production": "in_production",
    "post production": "in_production",
    "planned": "in_production",
    "pilot": "in_production",
    "rumored": "upcoming",
    "upcoming": "upcoming",
}


def language_code(name_or_code: str) -> str:
    """Resolve a language name ("hindi") or code ("HI") to a lower-case code."""
    value = name_or_code.strip().lower()
    return LANGUAGE_CODES.get(value, value)


def genre_id_for(genre: str, media_type: str) -> int | None:
    """Find the TMDb genre id whose name contains ``genre``."""
    needle = genre.strip().lower()
    if not needle:
        return None
    needle = GENRE_ALIASES.get(needle, {}).get(media_type, needle)
    table = MOVIE_GENRES if media_type == "movie" else TV_GENRES
    for genre_id, name in table.items():
        if needle in name.lower():
            return genre_id
    return None


def genre_names(data: dict, media_type: str) -> list[str]:
    """Genre names from either ``genre_ids`` (lists) or ``genres`` (details)."""
    if data.get("genres"):
        return [g["name"] for g in data["genres"] if g.get("name")]
    table = MOVIE_GENRES if media_type == "movie" else TV_GENRES
    names = []
    for genre_id in data.get("genre_ids") or []:
        name = table.get(genre_id) or MOVIE_GENRES.get(genre_id)
        if name:
            names.append(name)
    return names


def random_platforms() -> list[str]:
    """Placeholder availability: 1-3 random platforms."""
    count = random.randint(1, 3)
    return random.sample(PLACEHOLDER_PLATFORMS, count)


def map_status(status: str | None) -> str:
    if not status:
        return "released"
    return STATUS_MAP.get(status.lower(), "released")


def _release_year(date: str | None) -> int | None:
    if not date or len(date) < 4 or not date[:4].isdigit():
        return None
    return int(date[:4])


def _poster_url(path: str | None, title: str, kind: str) -> str:
    if path:
        return f"{TMDB_IMAGE_BASE_URL}{path}"
    return f"/placeholder.svg?height=384&width=256&query={quote(f'{title} {kind} poster')}"


def movie_to_content(movie: dict, platforms: list[str] | None = None) -> Content:
    """Convert a TMDb movie record to Content."""
    title = movie.get("title") or movie.get("original_title") or ""
    vote_average = float(movie.get("vote_average") or 0.0)
    return Content(
        id=movie["id"],
        title=title,
        type="movie",
        description=movie.get("overview") or "No description available",
        release_year=_release_year(movie.get("release_date")),
        poster_url=_poster_url(movie.get("poster_path"), title, "movie"),
        backdrop_url=(
            f"{TMDB_IMAGE_BASE_URL}{movie['backdrop_path']}"
            if movie.get("backdrop_path")
            else None
        ),
        imdb_rating=round(vote_average, 1),
        tmdb_rating=vote_average,
        genres=genre_names(movie, "movie"),
        streaming_platforms=platforms if platforms is not None else random_platforms(),
        runtime=movie.get("runtime") or 120,
        country="US",
        language=(movie.get("original_language") or "").upper(),
        status=map_status(movie.get("status")),
    )


def tv_to_content(show: dict, platforms: list[str] | None = None) -> Content:
    """Convert a TMDb TV show record to Content."""
    title = show.get("name") or show.get("original_name") or ""
    vote_average = float(show.get("vote_average") or 0.0)
    run_times = show.get("episode_run_time") or []
    countries = show.get("origin_country") or []
    return Content(
        id=show["id"],
        title=title,
        type="tv",
        description=show.get("overview") or "No description available",
        release_year=_release_year(show.get("first_air_date")),
        poster_url=_poster_url(show.get("poster_path"), title, "tv show"),
        backdrop_url=(
            f"{TMDB_IMAGE_BASE_URL}{show['backdrop_path']}"
            if show.get("backdrop_path")
            else None
        ),
        imdb_rating=round(vote_average, 1),
        tmdb_rating=vote_average,
        genres=genre_names(show, "tv"),
        streaming_platforms=platforms if platforms is not None else random_platforms(),
        runtime=run_times[0] if run_times else 45,
        country=countries[0] if countries else "US",
        language=(show.get("original_language") or "").upper(),
        status=map_status(show.get("status")),
    )


def to_content(media_type: str, data: dict, platforms: list[str] | None = None) -> Content:
    if media_type == "movie":
        return movie_to_content(data, platforms)
    return tv_to_content(data, platforms)


def provider_names(region_data: dict | None) -> list[str]:
    """Pick platform names from one region of a watch/providers response.

    Subscription providers first; rentals and purchases only top the list up
    to two entries.
    """
    if not region_data:
        return []
    platforms = _names(region_data.get("flatrate"))
    if region_data.get("rent") and len(platforms) < 2:
        platforms.extend(_names(region_data["rent"][:2]))
    if region_data.get("buy") and len(platforms) < 2:
        platforms.extend(_names(region_data["buy"][:1]))
    return platforms


def _names(providers: list[dict] | None) -> list[str]:
    return [
        p["provider_name"]
        for p in providers or []
        if isinstance(p, dict) and p.get("provider_name")
    ]


def pick_trailer(videos: list[dict]) -> str | None:
    """Best YouTube trailer URL from a videos list, or None."""
    youtube = [v for v in videos if v.get("site") == "YouTube"]
    candidates = (
        [v for v in youtube if v.get("type") == "Trailer" and v.get("official") is True],
        [v for v in youtube if v.get("type") == "Trailer"],
        [v for v in youtube if v.get("type") in ("Teaser", "Clip")],
    )
    for group in candidates:
        if group:
            return f"{YOUTUBE_WATCH_URL}{group[0]['key']}"
    return None


def top_cast(credits: dict | None, limit: int = 10) -> list[str]:
    if not credits:
        return []
    return [c["name"] for c in credits.get("cast", [])[:limit] if c.get("name")]
