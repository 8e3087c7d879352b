"""Exceptions raised by the upstream service clients."""


class BingeworthyError(Exception):
    """Base class for application errors."""


class UpstreamError(BingeworthyError):
    """An upstream HTTP call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamAuthError(UpstreamError):
    """The upstream API rejected our credentials."""


class ContentNotFoundError(UpstreamError):
    """The requested catalog item does not exist upstream."""


class LLMError(BingeworthyError):
    """A text-generation call failed or returned something unusable."""
