"""Shared dataclasses and enumerations."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Category(str, Enum):
    TV = "tv"
    MOVIE = "movie"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Category":
        normalized = (label or "").strip().lower()
        if normalized == "tv":
            return cls.TV
        if normalized == "movie":
            return cls.MOVIE
        return cls.UNKNOWN


class CacheState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class ListingStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    OK = "ok"
    NO_RESULTS = "no_results"
    FAILED = "failed"


@dataclass(frozen=True)
class ListingEntry:
    title: str
    poster_url: str
    detail_url: str
    # Synthetic identity; two entries with equal content stay distinct.
    id: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "poster_url": self.poster_url,
            "detail_url": self.detail_url,
        }


@dataclass(frozen=True)
class ListingResult:
    entries: List[ListingEntry]
    no_results: bool
    total_pages: int = 1
    pagination_resolved: bool = True
    skipped: int = 0


@dataclass(frozen=True)
class DetailRecord:
    title: str = "Unknown Title"
    synopsis: str = ""
    category: Category = Category.UNKNOWN
    episode_count: int = 0
    premiere_year: Optional[str] = None
    poster_url: Optional[str] = None

    @property
    def has_synopsis(self) -> bool:
        return bool(self.synopsis)

    def synopsis_preview(self, limit: int = 150) -> str:
        """Synopsis cut to ``limit`` characters with a trailing ellipsis."""
        if len(self.synopsis) > limit:
            return self.synopsis[:limit] + "..."
        return self.synopsis

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "synopsis": self.synopsis,
            "category": self.category.value,
            "episode_count": self.episode_count,
            "premiere_year": self.premiere_year,
            "poster_url": self.poster_url,
        }


@dataclass
class PageState:
    current_page: int = 1
    total_pages: int = 1
    active_query: str = ""

    @property
    def is_trending(self) -> bool:
        return not self.active_query


@dataclass(frozen=True)
class CacheEntry:
    """Read-only snapshot of one asset cache slot."""

    key: str
    state: CacheState
    attempt: int = 0
    value: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.state is CacheState.RESOLVED

    @property
    def failed(self) -> bool:
        return self.state is CacheState.FAILED

    @property
    def pending(self) -> bool:
        return self.state is CacheState.PENDING
