"""Data models for bingeworthy."""

from .content import APIResponse, Content, SearchFilters
from .recommendation import Recommendation, SearchIntent

__all__ = ["APIResponse", "Content", "SearchFilters", "Recommendation", "SearchIntent"]
