"""Shared fixtures and fake upstream records."""

import httpx
import pytest

from bingeworthy.services.tmdb import TMDbService

TMDB_BASE = "https://api.themoviedb.org/3"


def movie_record(id, title="Movie", vote_average=7.0, **extra):
    record = {
        "id": id,
        "title": title,
        "overview": f"{title} overview",
        "release_date": "2020-05-01",
        "poster_path": f"/p{id}.jpg",
        "backdrop_path": None,
        "vote_average": vote_average,
        "genre_ids": [28],
        "original_language": "en",
    }
    record.update(extra)
    return record


def tv_record(id, name="Show", vote_average=7.0, **extra):
    record = {
        "id": id,
        "name": name,
        "overview": f"{name} overview",
        "first_air_date": "2019-09-01",
        "poster_path": None,
        "backdrop_path": "/b.jpg",
        "vote_average": vote_average,
        "genre_ids": [18],
        "origin_country": ["GB"],
        "original_language": "en",
    }
    record.update(extra)
    return record


def upstream_path(request: httpx.Request) -> str:
    return request.url.path.removeprefix("/3")


def make_tmdb(handler) -> TMDbService:
    """A TMDbService whose HTTP traffic goes to ``handler``."""
    client = httpx.AsyncClient(
        base_url=TMDB_BASE,
        transport=httpx.MockTransport(handler),
    )
    return TMDbService(api_key="test-key", client=client)


@pytest.fixture
def requests_seen():
    return []
