"""Service layer for external API integrations."""

from .llm import LLMService
from .omdb import OMDbService
from .tmdb import TMDbService

__all__ = ["LLMService", "OMDbService", "TMDbService"]
