"""Normalized catalog data models."""

from typing import Any

from attrs import asdict, define, field, fields


@define
class Content:
    """A movie or TV show normalized from an upstream record."""

    id: int
    title: str
    type: str
    description: str = "No description available"
    release_year: int | None = None
    poster_url: str = ""
    backdrop_url: str | None = None
    imdb_rating: float = 0.0
    rotten_tomatoes_rating: int | None = None
    tmdb_rating: float = 0.0
    genres: list[str] = field(factory=list)
    streaming_platforms: list[str] = field(factory=list)
    cast: list[str] = field(factory=list)
    runtime: int = 0
    country: str = "US"
    language: str = ""
    trailer_url: str | None = None
    status: str = "released"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@define
class SearchFilters:
    """Caller-supplied filters. Empty strings and None mean unset."""

    platform: str = ""
    genre: str = ""
    language: str = ""
    country: str = ""
    type: str = ""
    year: int | None = None
    rating_min: float | None = None

    def active(self) -> dict[str, Any]:
        """Return only the fields that are set."""
        result = {}
        for f in fields(SearchFilters):
            value = getattr(self, f.name)
            if isinstance(value, str):
                value = value.strip()
            if value not in ("", None):
                result[f.name] = value
        return result

    def merged(self, other: "SearchFilters") -> "SearchFilters":
        """Return a copy with every set field of ``other`` laid over this one."""
        values = asdict(self)
        values.update(other.active())
        return SearchFilters(**values)

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "SearchFilters":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})


@define
class APIResponse:
    """Uniform success/error envelope returned by every operation."""

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    cached: bool | None = None

    @classmethod
    def ok(cls, data: Any, message: str | None = None) -> "APIResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str, data: Any = None) -> "APIResponse":
        return cls(success=False, error=error, data=data)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = _serialize(self.data)
        for name in ("error", "message", "cached"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result


def _serialize(value: Any) -> Any:
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value
