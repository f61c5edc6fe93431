"""Page and query state for browsing the catalog."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from .catalog import CatalogClient
from .errors import NetworkError, ParseError
from .models import ListingEntry, ListingStatus, PageState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingSnapshot:
    """Immutable view handed to the presentation layer."""

    current_page: int
    total_pages: int
    active_query: str
    entries: Tuple[ListingEntry, ...]
    status: ListingStatus
    pagination_resolved: bool = True

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


class PaginationController:
    """Owns :class:`PageState` and re-runs listing fetches on navigation.

    Every request supersedes the one before it: the older fetch is cancelled
    and, should its result still arrive, it is discarded.
    """

    def __init__(
        self,
        client: CatalogClient,
        on_change: Optional[Callable[[ListingSnapshot], None]] = None,
    ) -> None:
        self.client = client
        self.on_change = on_change
        self._state = PageState()
        self._entries: Tuple[ListingEntry, ...] = ()
        self._status = ListingStatus.IDLE
        self._settled_status = ListingStatus.IDLE
        self._pagination_resolved = True
        self._generation = 0
        self._inflight: Optional[asyncio.Task] = None

    @property
    def state(self) -> PageState:
        return replace(self._state)

    @property
    def entries(self) -> Tuple[ListingEntry, ...]:
        return self._entries

    @property
    def status(self) -> ListingStatus:
        return self._status

    @property
    def pagination_resolved(self) -> bool:
        return self._pagination_resolved

    def snapshot(self) -> ListingSnapshot:
        return ListingSnapshot(
            current_page=self._state.current_page,
            total_pages=self._state.total_pages,
            active_query=self._state.active_query,
            entries=self._entries,
            status=self._status,
            pagination_resolved=self._pagination_resolved,
        )

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #
    async def set_query(self, query: str) -> bool:
        query = query.strip()
        self._state.active_query = query
        self._state.current_page = 1
        self._state.total_pages = 1
        return await self._load(query, 1)

    async def home(self) -> bool:
        """Leave search mode and show the trending listing."""
        return await self.set_query("")

    async def go_to_page(self, page: int) -> bool:
        """Fetch ``page``; out-of-range pages are a no-op returning False."""
        if page < 1 or page > self._state.total_pages:
            logger.info("Page %d outside 1..%d; ignoring", page, self._state.total_pages)
            return False
        return await self._load(self._state.active_query, page)

    async def next_page(self) -> bool:
        return await self.go_to_page(self._state.current_page + 1)

    async def previous_page(self) -> bool:
        return await self.go_to_page(self._state.current_page - 1)

    async def refresh(self) -> bool:
        return await self._load(self._state.active_query, self._state.current_page)

    def cancel(self) -> None:
        """Drop whatever fetch is in flight; state stays as it was."""
        self._generation += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        if self._status is ListingStatus.LOADING:
            self._status = self._settled_status
            self._notify()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    async def _load(self, query: str, page: int) -> bool:
        self._generation += 1
        generation = self._generation
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        if self._status is not ListingStatus.LOADING:
            self._settled_status = self._status
        self._status = ListingStatus.LOADING
        self._notify()

        task = asyncio.ensure_future(self.client.fetch_listing(query, page))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Listing request %r page %d superseded", query, page)
                return False
            # The caller itself was cancelled; nothing is loading any more.
            self._status = self._settled_status
            self._notify()
            raise
        except (NetworkError, ParseError) as exc:
            if not self._is_current(generation, query):
                return False
            logger.warning("Listing fetch for %r page %d failed: %s", query, page, exc)
            self._status = ListingStatus.FAILED
            self._notify()
            return False
        finally:
            if self._inflight is task:
                self._inflight = None

        if not self._is_current(generation, query):
            logger.debug("Discarding stale listing for %r page %d", query, page)
            return False

        self._state.current_page = page
        # The last-page link is often missing on the last page itself.
        self._state.total_pages = max(result.total_pages, page)
        self._entries = tuple(result.entries)
        self._pagination_resolved = result.pagination_resolved
        self._status = ListingStatus.NO_RESULTS if result.no_results else ListingStatus.OK
        self._notify()
        return True

    def _is_current(self, generation: int, query: str) -> bool:
        return generation == self._generation and query == self._state.active_query

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self.snapshot())
        except Exception:
            logger.exception("Listing change callback raised")
