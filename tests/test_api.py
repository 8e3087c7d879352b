"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from bingeworthy.api import create_app
from bingeworthy.config import Settings
from bingeworthy.models.content import APIResponse, Content
from bingeworthy.recommendations import RecommendationEngine


class FakeSearch:
    """Records calls and returns canned envelopes."""

    configured = True

    def __init__(self, search=None, trending=None, details=None, error=None):
        self.search = search or APIResponse.ok([Content(id=1, title="Heat", type="movie")], "Found 1 results")
        self.trending = trending or APIResponse.ok([Content(id=2, title="Dark", type="tv")])
        self.details = details or APIResponse.ok(Content(id=3, title="Alien", type="movie"))
        self.error = error
        self.calls = []

    async def search_content(self, query, filters=None):
        self.calls.append(("search", query, filters))
        if self.error:
            raise self.error
        return self.search

    async def fetch_trending(self, time_window="week", page=1):
        self.calls.append(("trending", time_window, page))
        return self.trending

    async def fetch_content_details(self, content_id, media_type):
        self.calls.append(("details", content_id, media_type))
        return self.details


@pytest.fixture
def fake_search():
    return FakeSearch()


@pytest.fixture
def client(fake_search):
    app = create_app(
        settings=Settings(tmdb_api_key="k"),
        search=fake_search,
        recommender=RecommendationEngine(),
    )
    return TestClient(app)


class TestSearchEndpoint:
    """Tests for GET /api/content/search."""

    def test_success(self, client, fake_search):
        """Test filters are passed through and the response is cacheable."""
        response = client.get(
            "/api/content/search",
            params={"q": " heat ", "type": "movie", "year": "1995", "rating_min": "7.5"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["cached"] is True
        assert body["data"][0]["title"] == "Heat"
        assert "s-maxage=1800" in response.headers["cache-control"]

        _, query, filters = fake_search.calls[0]
        assert query == "heat"
        assert filters.type == "movie"
        assert filters.year == 1995
        assert filters.rating_min == 7.5

    def test_invalid_numeric_filters_dropped(self, client, fake_search):
        """Test unparseable or out of range year and rating are ignored."""
        client.get("/api/content/search", params={"q": "heat", "year": "abc", "rating_min": "11"})
        filters = fake_search.calls[0][2]
        assert filters.year is None
        assert filters.rating_min is None

    def test_missing_query(self, client):
        """Test an empty query is rejected."""
        response = client.get("/api/content/search", params={"q": "   "})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Search query is required"}

    def test_query_too_long(self, client):
        """Test queries over 100 characters are rejected."""
        response = client.get("/api/content/search", params={"q": "x" * 101})
        assert response.status_code == 400
        assert "too long" in response.json()["error"]

    def test_failure_maps_to_500(self):
        """Test search errors become 500 with the error text."""
        search = FakeSearch(search=APIResponse.fail("No movies found"))
        app = create_app(settings=Settings(), search=search, recommender=RecommendationEngine())
        response = TestClient(app).get("/api/content/search", params={"q": "heat"})
        assert response.status_code == 500
        assert response.json()["error"] == "No movies found"

    def test_unhandled_error(self):
        """Test unexpected exceptions become a generic 500."""
        search = FakeSearch(error=RuntimeError("boom"))
        app = create_app(settings=Settings(), search=search, recommender=RecommendationEngine())
        response = TestClient(app, raise_server_exceptions=False).get(
            "/api/content/search", params={"q": "heat"}
        )
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}


class TestTrendingEndpoint:
    """Tests for GET /api/content/trending."""

    def test_defaults(self, client, fake_search):
        """Test the default window and page."""
        response = client.get("/api/content/trending")
        assert response.status_code == 200
        assert response.json()["data"][0]["title"] == "Dark"
        assert fake_search.calls == [("trending", "week", 1)]
        assert "s-maxage=3600" in response.headers["cache-control"]

    def test_invalid_window(self, client):
        """Test unknown windows are rejected."""
        response = client.get("/api/content/trending", params={"timeWindow": "month"})
        assert response.status_code == 400

    @pytest.mark.parametrize("page", ["0", "101", "abc"])
    def test_invalid_page(self, client, page):
        """Test out of range pages are rejected."""
        response = client.get("/api/content/trending", params={"page": page})
        assert response.status_code == 400
        assert response.json()["error"] == "Page must be between 1 and 100"


class TestDetailsEndpoint:
    """Tests for GET /api/content/{id}."""

    def test_success(self, client, fake_search):
        """Test details are returned for a valid id and type."""
        response = client.get("/api/content/603", params={"type": "movie"})
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Alien"
        assert fake_search.calls == [("details", 603, "movie")]

    @pytest.mark.parametrize("content_id", ["abc", "0", "-4"])
    def test_invalid_id(self, client, content_id):
        """Test non-positive or non-numeric ids are rejected."""
        response = client.get(f"/api/content/{content_id}", params={"type": "movie"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid content ID"

    def test_type_required(self, client):
        """Test the media type is mandatory."""
        response = client.get("/api/content/603")
        assert response.status_code == 400

    def test_not_found(self):
        """Test not found maps to 404."""
        search = FakeSearch(details=APIResponse.fail("Content not found"))
        app = create_app(settings=Settings(), search=search, recommender=RecommendationEngine())
        response = TestClient(app).get("/api/content/9", params={"type": "tv"})
        assert response.status_code == 404

    def test_other_failure(self):
        """Test other failures map to 500."""
        search = FakeSearch(details=APIResponse.fail("Failed to fetch content details"))
        app = create_app(settings=Settings(), search=search, recommender=RecommendationEngine())
        response = TestClient(app).get("/api/content/9", params={"type": "tv"})
        assert response.status_code == 500


class TestRecommendationsEndpoint:
    """Tests for POST /api/ai/recommendations."""

    def test_top_list(self, client):
        """Test top-list prompts return ranked recommendations."""
        response = client.post(
            "/api/ai/recommendations",
            json={"query": "List top 5 best horror movies"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["query"] == "List top 5 best horror movies"
        assert len(body["data"]) == 5
        assert body["data"][0]["title"] == "Hereditary"

    def test_max_recommendations(self, client):
        """Test the result cap is honoured."""
        response = client.post(
            "/api/ai/recommendations",
            json={"query": "netflix and hbo", "maxRecommendations": 2},
        )
        assert len(response.json()["data"]) == 2

    def test_search_titles(self, client):
        """Test the search_titles mode returns plain titles."""
        response = client.post(
            "/api/ai/recommendations",
            json={"query": "korean", "type": "search_titles", "filters": {"type": "tv"}},
        )
        body = response.json()
        assert body["titles"][0] == "Squid Game"
        assert "data" not in body

    def test_short_query(self, client):
        """Test queries under three characters are rejected."""
        response = client.post("/api/ai/recommendations", json={"query": " ab "})
        assert response.status_code == 400

    def test_out_of_range_max(self, client):
        """Test maxRecommendations is bounded."""
        response = client.post(
            "/api/ai/recommendations",
            json={"query": "anything", "maxRecommendations": 500},
        )
        assert response.status_code == 422


def test_health(client):
    response = client.get("/health")
    assert response.json() == {"status": "ok", "tmdb_configured": True}
