"""Recommendation and query-interpretation models."""

from attrs import asdict, define, field

from .content import SearchFilters


@define
class Recommendation:
    """A suggested title with a confidence score."""

    id: str
    title: str
    description: str
    category: str
    confidence: float

    def to_dict(self) -> dict:
        return asdict(self)


@define
class SearchIntent:
    """How a free-text query should be answered."""

    search_terms: str | None
    filters: SearchFilters = field(factory=SearchFilters)
    use_discover: bool = False
    reasoning: str = "Using specific title search"
