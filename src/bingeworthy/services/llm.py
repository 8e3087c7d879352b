"""Text-generation services used to enrich recommendations and searches.

Two providers are supported. Hugging Face inference ranks "top N" lists,
Mistral chat completions suggest titles and interpret free-text queries.
Model output is untrusted: JSON is pulled out of the generated text and any
malformed piece is skipped rather than failing the whole response.
"""

import json
import re

import httpx
from attrs import define
from loguru import logger

from ..errors import LLMError

HUGGINGFACE_URL = "https://api-inference.huggingface.co/models/{model}"
MISTRAL_URL = "https://api.mistral.ai/v1/chat/completions"

RECOMMENDATION_PROMPT = """You are a movie and TV show expert. Recommend the best content for "{query}".

Please provide exactly {count} recommendations for the best {category} movies and TV shows. For each recommendation, provide:

1. Title (exact name)
2. Brief description (max 80 characters)
3. Category (genre or type)
4. Confidence between 0 and 1

Format your response as a JSON array with this structure:
[
  {{
    "title": "Movie/Show Title",
    "description": "Brief description",
    "category": "Genre/Type",
    "confidence": 0.95
  }}
]

Focus on critically acclaimed, popular, and influential content. Include both movies and TV shows if the query mentions both."""

TITLES_PROMPT = """5 movies & TV shows only for "{query}", sorted by release year. Return ONLY a valid JSON array (no text before or after).
JSON format:
[
  {{
    "title": "Movie or TV title",
    "description": "Short plot or info in no more than 15 words",
    "category": "movie | tv",
    "confidence": 0.95,
    "release_year": 2020
  }}
]
Ensure it is strictly JSON. If nothing matches, still return 5 sorted by latest year."""

INTERPRET_PROMPT = """Analyze this movie/TV search query: "{query}"

Extract:
1. Specific movie/show titles to search for
2. Filters like genre, language, country, platform, type (movie or tv), year
3. Whether this is asking for top/best content (use discover API) or specific titles (use search API)

Examples:
- "Hindi movies" -> language: hindi, useDiscoverAPI: true
- "Top 10 action movies" -> genre: action, useDiscoverAPI: true
- "Batman movies" -> searchTerms: "Batman", useDiscoverAPI: false
- "Best Netflix shows" -> platform: Netflix, useDiscoverAPI: true
- "Horror movies from 2023" -> genre: horror, year: 2023, useDiscoverAPI: true

Return only JSON with: searchTerms, filters {{genre, language, country, platform, type, year}}, useDiscoverAPI, reasoning"""


def strip_code_fences(text: str) -> str:
    return re.sub(r"```(?:json)?", "", text, flags=re.IGNORECASE).strip()


def parse_json_objects(text: str) -> list[dict]:
    """Parse every flat ``{...}`` object in ``text``, skipping broken ones."""
    objects = []
    for match in re.findall(r"\{[^{}]*\}", strip_code_fences(text)):
        try:
            obj = json.loads(match)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            objects.append(obj)
    return objects


def extract_json_array(text: str) -> list:
    match = re.search(r"\[[\s\S]*\]", strip_code_fences(text))
    if not match:
        raise LLMError("No JSON array in model output")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise LLMError(f"Invalid JSON from model: {e}") from e
    if not isinstance(parsed, list):
        raise LLMError("Model output is not a JSON array")
    return parsed


def extract_json_object(text: str) -> dict:
    cleaned = strip_code_fences(text)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        raise LLMError("No JSON object in model output")
    try:
        parsed = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise LLMError(f"Invalid JSON from model: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMError("Model output is not a JSON object")
    return parsed


@define
class LLMService:
    """Client for Hugging Face inference and Mistral chat completions."""

    huggingface_api_key: str | None = None
    mistral_api_key: str | None = None
    huggingface_model: str = "microsoft/DialoGPT-large"
    mistral_model: str = "mistral-small-latest"
    _client: httpx.AsyncClient | None = None

    @property
    def has_huggingface(self) -> bool:
        return bool(self.huggingface_api_key) and self.huggingface_api_key.startswith("hf_")

    @property
    def has_mistral(self) -> bool:
        return bool(self.mistral_api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Content-Type": "application/json"},
                timeout=60.0,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _post(self, url: str, api_key: str, payload: dict) -> dict | list:
        client = await self._get_client()
        try:
            resp = await client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LLMError(f"LLM API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise LLMError(f"LLM request failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise LLMError("LLM API returned invalid JSON") from e

    async def generate_text(self, prompt: str) -> str:
        """Run a Hugging Face text-generation model."""
        if not self.has_huggingface:
            raise LLMError("Hugging Face API key not configured")
        result = await self._post(
            HUGGINGFACE_URL.format(model=self.huggingface_model),
            self.huggingface_api_key,
            {
                "inputs": prompt,
                "parameters": {
                    "max_length": 1000,
                    "temperature": 0.3,
                    "do_sample": True,
                    "top_p": 0.9,
                },
            },
        )
        if isinstance(result, list) and result:
            result = result[0]
        if not isinstance(result, dict):
            raise LLMError("Unexpected Hugging Face response shape")
        text = result.get("generated_text") or ""
        if not isinstance(text, str):
            raise LLMError("Unexpected Hugging Face response shape")
        return text

    async def chat(self, prompt: str, temperature: float = 0.7, max_tokens: int = 2000) -> str:
        """Run a single-turn Mistral chat completion."""
        if not self.has_mistral:
            raise LLMError("Mistral API key not configured")
        data = await self._post(
            MISTRAL_URL,
            self.mistral_api_key,
            {
                "model": self.mistral_model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError("LLM returned no content") from e
        if not isinstance(content, str) or not content.strip():
            raise LLMError("LLM returned no content")
        return content.strip()

    async def rank_recommendations(self, query: str, category: str, count: int) -> list[dict]:
        """Ask the model for a ranked list of ``count`` titles in ``category``."""
        text = await self.generate_text(
            RECOMMENDATION_PROMPT.format(query=query, category=category, count=count)
        )
        items = [item for item in extract_json_array(text) if isinstance(item, dict)]
        logger.debug(f"Model ranked {len(items)} recommendations for '{category}'")
        return items

    async def suggest_titles(self, query: str) -> list[dict]:
        """Ask the model for candidate titles matching a free-text query."""
        text = await self.chat(TITLES_PROMPT.format(query=query))
        items = [
            obj
            for obj in parse_json_objects(text)
            if isinstance(obj.get("title"), str) and obj["title"].strip()
        ]
        if not items:
            raise LLMError("Invalid JSON from LLM")
        return items

    async def interpret_query(self, query: str) -> dict:
        """Ask the model to turn a query into search terms and filters."""
        text = await self.chat(INTERPRET_PROMPT.format(query=query), temperature=0.3, max_tokens=300)
        return extract_json_object(text)
