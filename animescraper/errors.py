"""Exception types raised by animescraper.

Severity:
  - ParseError    -> batch level; callers surface an empty or unchanged result.
  - FieldMissing  -> per field; always recovered with the field default.
  - NetworkError  -> transport failure; listings/details report it once,
                     assets retry it inside the cache.
  - AssetFetchError -> payload arrived but is not usable image data.
"""

from __future__ import annotations

from typing import Optional


class AnimeScraperError(Exception):
    """Base exception for all animescraper errors."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ParseError(AnimeScraperError):
    """Input bytes could not be decoded or contain no markup."""


class FieldMissing(AnimeScraperError):
    """A single record field is absent or unparsable."""

    def __init__(self, field: str, message: str = "") -> None:
        super().__init__(message or f"field {field!r} missing", {"field": field})
        self.field = field


class NetworkError(AnimeScraperError):
    """The transport could not deliver a response body."""

    def __init__(
        self,
        message: str,
        url: str,
        status: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
        self.status = status


class AssetFetchError(AnimeScraperError):
    """An asset response was received but rejected by the validator."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message, {"url": url})
        self.url = url
