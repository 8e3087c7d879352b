"""Configuration management using environment variables."""

import os
import sys
from functools import lru_cache

from attrs import define
from loguru import logger

PLACEHOLDER_TMDB_KEY = "your_tmdb_api_key_here"


@define
class Settings:
    """Application settings."""

    tmdb_api_key: str | None = None
    tmdb_read_access_token: str | None = None
    huggingface_api_key: str | None = None
    mistral_api_key: str | None = None
    omdb_api_key: str | None = None
    watch_region: str = "US"
    log_level: str = "INFO"
    max_search_pages: int = 500

    @property
    def tmdb_configured(self) -> bool:
        return bool(self.tmdb_api_key) and self.tmdb_api_key != PLACEHOLDER_TMDB_KEY


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        tmdb_api_key=os.environ.get("TMDB_API_KEY"),
        tmdb_read_access_token=os.environ.get("TMDB_READ_ACCESS_TOKEN"),
        huggingface_api_key=os.environ.get("HUGGINGFACE_API_KEY"),
        mistral_api_key=os.environ.get("MISTRAL_API_KEY"),
        omdb_api_key=os.environ.get("OMDB_API_KEY"),
        watch_region=os.environ.get("WATCH_REGION", "US"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        max_search_pages=int(os.environ.get("MAX_SEARCH_PAGES", "500")),
    )


def configure_logging(level: str = "INFO") -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    )
