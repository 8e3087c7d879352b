"""Tests for the LLM and OMDb clients."""

import asyncio
import json

import httpx
import pytest

from bingeworthy.errors import LLMError, UpstreamError
from bingeworthy.recommendations import RecommendationEngine
from bingeworthy.services.llm import (
    LLMService,
    extract_json_array,
    extract_json_object,
    parse_json_objects,
)
from bingeworthy.services.omdb import OMDbService


def mistral_reply(content):
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def make_llm(handler, **keys):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LLMService(client=client, **keys)


class TestJSONExtraction:
    """Tests for pulling JSON out of model text."""

    def test_array_inside_prose_and_fences(self):
        """Test arrays are found inside surrounding text."""
        text = 'Sure!\n```json\n[{"title": "Alien"}]\n```\nEnjoy.'
        assert extract_json_array(text) == [{"title": "Alien"}]

    def test_array_missing(self):
        """Test text without an array raises."""
        with pytest.raises(LLMError):
            extract_json_array("no idea")

    def test_broken_objects_skipped(self):
        """Test malformed objects are dropped, good ones kept."""
        text = '[{"title": "Heat"}, {"title": "Broken",}, {"title": "Ran"}]'
        assert [o["title"] for o in parse_json_objects(text)] == ["Heat", "Ran"]

    def test_object(self):
        """Test the outermost object is parsed, nested values included."""
        text = 'Result: {"searchTerms": "Batman", "filters": {"type": "movie"}} done'
        assert extract_json_object(text)["filters"] == {"type": "movie"}


class TestLLMService:
    """Tests for the HTTP side of the LLM client."""

    def test_provider_flags(self):
        """Test keys enable providers, Hugging Face needs the hf_ prefix."""
        assert LLMService(huggingface_api_key="hf_abc").has_huggingface
        assert not LLMService(huggingface_api_key="abc").has_huggingface
        assert LLMService(mistral_api_key="m").has_mistral
        assert not LLMService().has_mistral

    def test_suggest_titles(self, requests_seen):
        """Test Mistral suggestions are parsed and authorised."""

        def handler(request):
            requests_seen.append(request)
            return mistral_reply('[{"title": "Dark", "category": "tv"}, {"title": ""}]')

        llm = make_llm(handler, mistral_api_key="secret")
        items = asyncio.run(llm.suggest_titles("german thrillers"))

        assert items == [{"title": "Dark", "category": "tv"}]
        request = requests_seen[0]
        assert request.headers["authorization"] == "Bearer secret"
        assert json.loads(request.content)["model"] == "mistral-small-latest"

    def test_chat_without_key(self):
        """Test chat refuses to run unconfigured."""
        with pytest.raises(LLMError):
            asyncio.run(LLMService().chat("hi"))

    def test_http_error(self):
        """Test upstream failures become LLMError."""
        llm = make_llm(lambda request: httpx.Response(429), mistral_api_key="k")
        with pytest.raises(LLMError, match="429"):
            asyncio.run(llm.interpret_query("hindi movies"))

    def test_empty_content(self):
        """Test blank completions are rejected."""
        llm = make_llm(lambda request: mistral_reply("   "), mistral_api_key="k")
        with pytest.raises(LLMError):
            asyncio.run(llm.chat("hi"))

    def test_non_json_body(self):
        """Test a 200 with an HTML body becomes LLMError."""
        llm = make_llm(lambda request: httpx.Response(200, text="<html>busy</html>"), huggingface_api_key="hf_x")
        with pytest.raises(LLMError, match="invalid JSON"):
            asyncio.run(llm.generate_text("hi"))

    def test_non_string_content(self):
        """Test a completion whose content is not text is rejected."""
        llm = make_llm(lambda request: mistral_reply(["chunk"]), mistral_api_key="k")
        with pytest.raises(LLMError, match="no content"):
            asyncio.run(llm.chat("hi"))

    def test_non_json_body_uses_curated_list(self):
        """Test recommendations fall back when the model answers with HTML."""
        llm = make_llm(lambda request: httpx.Response(200, text="<html>busy</html>"), huggingface_api_key="hf_x")
        recs = asyncio.run(RecommendationEngine(llm=llm).generate("List top 5 best horror movies"))
        assert len(recs) == 5
        assert recs[0].title == "Hereditary"

    def test_rank_recommendations(self):
        """Test Hugging Face generated text is parsed into items."""

        def handler(request):
            text = 'Here: [{"title": "Alien", "confidence": 0.9}, "junk"]'
            return httpx.Response(200, json=[{"generated_text": text}])

        llm = make_llm(handler, huggingface_api_key="hf_x")
        items = asyncio.run(llm.rank_recommendations("scary", "horror", 1))
        assert items == [{"title": "Alien", "confidence": 0.9}]


def make_omdb(handler):
    client = httpx.AsyncClient(
        base_url="https://www.omdbapi.com",
        transport=httpx.MockTransport(handler),
    )
    return OMDbService(api_key="key", client=client)


class TestOMDbService:
    """Tests for OMDb ratings."""

    def test_ratings(self, requests_seen):
        """Test IMDb and Rotten Tomatoes values are parsed."""

        def handler(request):
            requests_seen.append(request)
            return httpx.Response(200, json={
                "Response": "True",
                "imdbRating": "8.3",
                "Ratings": [
                    {"Source": "Internet Movie Database", "Value": "8.3/10"},
                    {"Source": "Rotten Tomatoes", "Value": "87%"},
                ],
            })

        assert asyncio.run(make_omdb(handler).get_ratings("tt0113277")) == (8.3, 87)
        assert requests_seen[0].url.params["i"] == "tt0113277"

    def test_missing_values(self):
        """Test N/A ratings come back as None."""

        def handler(request):
            return httpx.Response(200, json={"Response": "True", "imdbRating": "N/A", "Ratings": []})

        assert asyncio.run(make_omdb(handler).get_ratings("tt1")) == (None, None)

    def test_unknown_title(self):
        """Test OMDb misses are not errors."""

        def handler(request):
            return httpx.Response(200, json={"Response": "False", "Error": "Incorrect IMDb ID."})

        assert asyncio.run(make_omdb(handler).get_ratings("tt0")) == (None, None)

    def test_http_failure(self):
        """Test HTTP errors become upstream errors."""
        with pytest.raises(UpstreamError):
            asyncio.run(make_omdb(lambda request: httpx.Response(500)).get_ratings("tt1"))

    def test_non_json_body(self):
        """Test an HTML body becomes an upstream error."""
        with pytest.raises(UpstreamError, match="invalid JSON"):
            asyncio.run(make_omdb(lambda request: httpx.Response(200, text="<html>")).get_ratings("tt1"))
